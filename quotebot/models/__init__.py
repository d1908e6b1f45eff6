"""Domain values, lookup tables and upstream payload schemas."""

from .constants import (
    FIAT_FIELDS,
    SYMBOLS,
    DEFAULT_CURRENCY,
)  # re-export
from .quote import Quote
from .upstream import CoinPage, ShapeShiftRate, CexTicker

__all__ = [
    "FIAT_FIELDS",
    "SYMBOLS",
    "DEFAULT_CURRENCY",
    "Quote",
    "CoinPage",
    "ShapeShiftRate",
    "CexTicker",
]
