"""Schemas for upstream JSON payloads.

Every upstream body passes through one of these models before the resolver
sees it; a ``ValidationError`` here becomes ``UnparseableResponse``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class CoinPage(BaseModel):
    """coincap.io ``/page/{TICKER}`` payload; only the FIAT_FIELDS prices are read."""

    model_config = ConfigDict(extra="ignore")

    price_usd: Optional[Decimal] = Field(default=None, gt=0)
    price_eur: Optional[Decimal] = Field(default=None, gt=0)


class ShapeShiftRate(BaseModel):
    """shapeshift.io ``/marketinfo/{pair}``: either a rate or an error message."""

    model_config = ConfigDict(extra="ignore")

    pair: Optional[str] = None
    rate: Optional[Decimal] = Field(default=None, gt=0)
    error: Optional[str] = None


class CexTicker(BaseModel):
    """cex.io ``/ticker/{A}/{B}``; ``last`` arrives as a decimal string."""

    model_config = ConfigDict(extra="ignore")

    last: Optional[StrictStr] = None
    error: Optional[str] = None

    @field_validator("last")
    @classmethod
    def last_is_decimal(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            value = Decimal(v.strip())
        except InvalidOperation as e:
            raise ValueError(f"last is not a decimal string: {v!r}") from e
        if not value.is_finite() or value <= 0:
            raise ValueError(f"last must be a positive number: {v!r}")
        return v.strip()

    @property
    def last_price(self) -> Optional[Decimal]:
        return Decimal(self.last) if self.last is not None else None
