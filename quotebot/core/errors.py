"""Error taxonomy shared by the quote engine, the chat dispatcher and the API.

Quote errors carry the ticker or pair they concern so both the chat reply and
the JSON error body can name it.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger("quotebot.errors")


class QuoteBotError(Exception):
    pass


# Input / routing --------------------------------------------------------


class InputError(QuoteBotError):
    pass


class EmptyInput(InputError):
    pass


class OverlongImplicitInput(InputError):
    """Un-prefixed text with too many words to be a ticker lookup."""


class InvalidAmount(InputError):
    def __init__(self, raw: str):
        super().__init__(f"invalid amount {raw!r}")
        self.raw = raw


class RoutingFailure(QuoteBotError):
    pass


class UnknownCommand(RoutingFailure):
    def __init__(self, name: str):
        super().__init__(f"unknown command {name!r}")
        self.name = name


# Upstream / quoting -----------------------------------------------------


class QuoteError(QuoteBotError):
    error_code = "quote_error"
    http_status = status.HTTP_502_BAD_GATEWAY

    def __init__(self, subject: str, detail: str = ""):
        super().__init__(f"{subject}: {detail}" if detail else subject)
        self.subject = subject
        self.detail = detail

    def user_message(self) -> str:
        return f"Error retrieving {self.subject} price"


class UpstreamUnavailable(QuoteError):
    error_code = "upstream_unavailable"

    def user_message(self) -> str:
        return f"Error retrieving {self.subject} price, try again later"


class UnparseableResponse(QuoteError):
    error_code = "unparseable_response"

    def user_message(self) -> str:
        return f"Error decoding response for {self.subject}"


class SymbolNotFound(QuoteError):
    error_code = "symbol_not_found"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, subject: str, source: str = "", detail: str = ""):
        super().__init__(subject, detail)
        self.source = source

    def user_message(self) -> str:
        if self.source:
            return f"{self.subject} is not on {self.source}"
        return f"{self.subject} was not found"


class PairNotQuotable(QuoteError):
    error_code = "pair_not_quotable"
    http_status = status.HTTP_404_NOT_FOUND

    def user_message(self) -> str:
        if self.detail:
            return f"Cannot quote {self.subject}: {self.detail}"
        return f"Cannot quote {self.subject}"


# FastAPI handlers -------------------------------------------------------


def quote_error_handler(request: Request, exc: QuoteError):  # type: ignore
    if isinstance(exc, UnparseableResponse):
        logger.error("unparseable upstream response: %s", exc)
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.error_code, "detail": exc.user_message()},
    )


def input_error_handler(request: Request, exc: InputError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "invalid_input", "detail": str(exc)},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
