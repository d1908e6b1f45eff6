"""Render a Quote as the one-line chat reply."""

from __future__ import annotations

from quotebot.models.constants import SYMBOLS
from quotebot.models.quote import Quote
from .money import amount_places, fmt, price_places


def currency_glyph(ticker: str) -> str:
    return SYMBOLS.get(ticker, ticker)


def format_quote(quote: Quote) -> str:
    glyph = currency_glyph(quote.second)
    if quote.amount_requested:
        total = quote.total
        text = (
            f"{fmt(quote.amount, amount_places(quote.amount))} {quote.first} = "
            f"{glyph}{fmt(total, price_places(total))}"
        )
    else:
        unit = quote.unit_price
        text = f"1 {quote.first} = {glyph}{fmt(unit, price_places(unit))}"
    if quote.source_label:
        text += f"\nSource: {quote.source_label}"
    return text
