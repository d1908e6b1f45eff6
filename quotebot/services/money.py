"""Decimal rounding helpers.

Centralized so the formatter and the API serialize prices with identical
rounding semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP, localcontext

ONE = Decimal(1)


def quantize(value: Decimal, places: int) -> Decimal:
    # quantize fails once the result needs more digits than the context precision
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def price_places(value: Decimal) -> int:
    """Prices under one unit get satoshi precision, everything else cents."""
    return 8 if value < ONE else 2


def amount_places(value: Decimal) -> int:
    if value < ONE:
        return 8
    if value == value.to_integral_value():
        return 0
    return 2


def fmt(value: Decimal, places: int) -> str:
    return f"{quantize(value, places):.{places}f}"
