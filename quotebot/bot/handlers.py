from __future__ import annotations

"""Command handlers and the per-message dispatcher.

``Dispatcher.handle`` is the single entry point for one inbound message. It
never raises: every outcome is either a reply string or ``None`` (drop).
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Optional, Sequence

from quotebot.core.config import Settings
from quotebot.core.errors import (
    InputError,
    InvalidAmount,
    QuoteError,
    RoutingFailure,
    UnparseableResponse,
)
from quotebot.models.constants import (
    DEFAULT_CURRENCY,
    GENERIC_ERROR_MESSAGE,
    HELP_MESSAGE,
    SOURCE_MESSAGE,
    WELCOME_MESSAGE,
)
from quotebot.services.formatter import format_quote
from quotebot.services.quotes.cache_service import ScrapeCache
from quotebot.services.quotes.providers import PriceSources, make_price_sources
from quotebot.services.quotes.resolver import QuoteResolver
from .commands import Command, CommandRouter, HandlerKind

logger = logging.getLogger("quotebot.bot")

Handler = Callable[[Sequence[str]], str]

# Larger amounts are typos or abuse, not conversions
MAX_AMOUNT = Decimal("1e15")


def parse_amount(raw: str) -> Decimal:
    try:
        amount = Decimal(raw.replace(",", ""))
    except InvalidOperation as e:
        raise InvalidAmount(raw) from e
    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        raise InvalidAmount(raw)
    return amount


class Dispatcher:
    def __init__(self, router: CommandRouter, resolver: QuoteResolver):
        self.router = router
        self.resolver = resolver
        self._handlers: Dict[HandlerKind, Handler] = {
            HandlerKind.START: self.start,
            HandlerKind.HELP: self.help,
            HandlerKind.SOURCE: self.source,
            HandlerKind.QUOTE: self.quote,
            HandlerKind.CONVERT: self.convert,
            HandlerKind.CEX: self.cex,
            HandlerKind.JSE: self.jse,
        }

    # Handlers -------------------------------------------------
    def start(self, arguments: Sequence[str]) -> str:
        return WELCOME_MESSAGE

    def help(self, arguments: Sequence[str]) -> str:
        return HELP_MESSAGE

    def source(self, arguments: Sequence[str]) -> str:
        return SOURCE_MESSAGE

    def quote(self, arguments: Sequence[str]) -> str:
        if not arguments:
            return HELP_MESSAGE
        second = arguments[1] if len(arguments) > 1 else DEFAULT_CURRENCY
        return format_quote(self.resolver.resolve(arguments[0], second))

    def convert(self, arguments: Sequence[str]) -> str:
        if len(arguments) < 3:
            return HELP_MESSAGE
        amount = parse_amount(arguments[0])
        return format_quote(self.resolver.resolve(arguments[1], arguments[2], amount))

    def cex(self, arguments: Sequence[str]) -> str:
        if not arguments:
            return HELP_MESSAGE
        second = arguments[1] if len(arguments) > 1 else DEFAULT_CURRENCY
        return format_quote(self.resolver.resolve_exchange(arguments[0], second))

    def jse(self, arguments: Sequence[str]) -> str:
        if not arguments:
            return HELP_MESSAGE
        return format_quote(self.resolver.resolve_listed(arguments[0]))

    # Dispatch -------------------------------------------------
    def run(self, command: Command) -> str:
        return self._handlers[command.handler](command.arguments)

    def handle(self, text: str, is_command: bool) -> Optional[str]:
        try:
            command = self.router.parse(text, is_command)
        except RoutingFailure as e:
            logger.info("routing failed (%s), answering with help", e)
            return HELP_MESSAGE
        except InputError as e:
            logger.debug("dropping message: %s", e)
            return None

        logger.info("dispatching %s %s", command.handler.value, list(command.arguments))
        try:
            return self.run(command)
        except InvalidAmount as e:
            logger.info("bad input for %s: %s", command.handler.value, e)
            return HELP_MESSAGE
        except QuoteError as e:
            if isinstance(e, UnparseableResponse):
                logger.error("unparseable upstream response: %s", e)
            else:
                logger.info("quote failed: %s", e)
            return e.user_message()
        except Exception:
            logger.exception("handler %s failed", command.handler.value)
            return GENERIC_ERROR_MESSAGE


def build_dispatcher(settings: Settings, sources: PriceSources | None = None) -> Dispatcher:
    """Wire router, sources, cache and resolver once at startup."""
    if sources is None:
        sources = make_price_sources(settings)
    cache = ScrapeCache(settings.scrape_cache_ttl_seconds)
    resolver = QuoteResolver(
        sources,
        cache,
        fee_fraction=settings.fee_fraction,
        listing_currency=settings.listing_currency,
    )
    router = CommandRouter(
        bot_name=settings.bot_name,
        implicit_max_tokens=settings.implicit_quote_max_tokens,
    )
    return Dispatcher(router, resolver)
