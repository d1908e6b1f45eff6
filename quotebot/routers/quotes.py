from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from quotebot.bot.handlers import Dispatcher
from quotebot.models.constants import DEFAULT_CURRENCY
from quotebot.models.quote import Quote
from quotebot.services.formatter import format_quote
from quotebot.services.money import fmt, price_places

"""Quotes router exposing the resolver over HTTP.

Endpoints:
    - GET /quotes/cache            -> live scrape cache entries
    - GET /quotes/listed/{symbol}  -> scraped listing quote
    - GET /quotes/{first}          -> coin/fiat quote (?second=USD&amount=)

Handlers are sync so FastAPI runs the blocking upstream calls in its threadpool.
Quote errors are mapped to JSON bodies by the app-level exception handler.
"""

router = APIRouter(prefix="/quotes", tags=["quotes"])


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


class QuoteOut(BaseModel):
    first: str
    second: str
    unit_price: str
    amount: str
    total: str
    source: Optional[str] = None
    text: str

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteOut":
        return cls(
            first=quote.first,
            second=quote.second,
            unit_price=fmt(quote.unit_price, price_places(quote.unit_price)),
            amount=str(quote.amount),
            total=fmt(quote.total, price_places(quote.total)),
            source=quote.source_label,
            text=format_quote(quote),
        )


@router.get("/cache", summary="List live scrape cache entries")
def cache_entries(
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> Dict[str, Dict[str, str]]:
    return dispatcher.resolver.cache.snapshot()


@router.get("/listed/{symbol}", response_model=QuoteOut, summary="Quote a listed stock")
def listed_quote(
    symbol: str,
    amount: Optional[Decimal] = Query(None, gt=0),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return QuoteOut.from_quote(dispatcher.resolver.resolve_listed(symbol, amount))


@router.get("/{first}", response_model=QuoteOut, summary="Quote a coin or currency pair")
def pair_quote(
    first: str,
    second: str = Query(DEFAULT_CURRENCY, min_length=2, max_length=12),
    amount: Optional[Decimal] = Query(None, gt=0, description="Amount of `first`"),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return QuoteOut.from_quote(dispatcher.resolver.resolve(first, second, amount))
