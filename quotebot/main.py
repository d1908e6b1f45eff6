from fastapi import FastAPI

from .bot.handlers import Dispatcher, build_dispatcher
from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .routers import commands, health, quotes


def create_app(
    settings_override: Settings | None = None,
    dispatcher: Dispatcher | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests.
    dispatcher: pass a dispatcher wired to fake price sources to keep tests
    off the network. Falls back to one built from settings.
    """
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    # One dispatcher (and so one scrape cache) per process
    app.state.dispatcher = dispatcher or build_dispatcher(settings)

    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(errors.QuoteError, errors.quote_error_handler)
    app.add_exception_handler(errors.InputError, errors.input_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    app.include_router(health.router)
    app.include_router(quotes.router)
    app.include_router(commands.router)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "version": settings.version}

    return app
