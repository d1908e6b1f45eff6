from __future__ import annotations

"""Price source abstraction.

Each upstream gets one adapter that knows how to fetch and decode its payload.
Adapters raise the QuoteError family and never return partial data.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Callable, Dict, Protocol

Fetcher = Callable[[str], bytes]


class PriceSource(ABC):
    label: str = ""

    def __init__(self, fetcher: Fetcher):
        self._fetch = fetcher

    @abstractmethod
    def fetch_raw_price(self, key: str):
        """Return the decoded price payload for ``key`` (ticker, pair or page)."""
        raise NotImplementedError


class SupportsListing(Protocol):
    label: str

    def fetch_listing(self) -> Dict[str, Decimal]: ...
