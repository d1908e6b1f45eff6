import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

# Both are set per unit of work: one HTTP request or one inbound chat message.
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
chat_id_ctx: ContextVar[int | None] = ContextVar("chat_id", default=None)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        chat_id = chat_id_ctx.get()
        record.chat_id = chat_id if chat_id is not None else "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "request_id": getattr(record, "request_id", "-"),
        }
        chat_id = getattr(record, "chat_id", "-")
        if chat_id != "-":
            base["chat_id"] = chat_id
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def init_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    # aiogram logs every polled update at INFO
    logging.getLogger("aiogram.event").setLevel(logging.DEBUG if debug else logging.WARNING)


@contextmanager
def request_context(chat_id: Optional[int] = None) -> Iterator[str]:
    """Bind a fresh request id (and optionally the chat id) for the enclosed work."""
    rid = uuid.uuid4().hex[:12]
    rid_token = request_id_ctx.set(rid)
    chat_token = chat_id_ctx.set(chat_id)
    try:
        yield rid
    finally:
        chat_id_ctx.reset(chat_token)
        request_id_ctx.reset(rid_token)


async def request_context_middleware(request, call_next):  # type: ignore
    logger = logging.getLogger("quotebot.request")
    with request_context():
        logger.debug("request start %s %s", request.method, request.url.path)
        try:
            return await call_next(request)
        finally:
            logger.debug("request end")
