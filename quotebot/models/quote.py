from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

ONE = Decimal(1)


@dataclass(frozen=True)
class Quote:
    """Result of one lookup: ``1 first = unit_price second``.

    ``amount_requested`` is False when the caller did not ask for an amount,
    which is how the formatter tells ``/quote BTC`` from ``/convert 1 BTC USD``.
    """

    first: str
    second: str
    unit_price: Decimal
    amount: Decimal = ONE
    source_label: Optional[str] = None
    amount_requested: bool = False

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.amount
