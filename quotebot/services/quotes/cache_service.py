from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, Optional

from quotebot.core.errors import SymbolNotFound
from .base import SupportsListing

logger = logging.getLogger("quotebot.quotes")

"""Scrape cache for the HTML listing source.

Purpose:
    Keep the last scraped price of every listed symbol for a fixed TTL so that
    repeated /jse lookups do not download and parse the full page each time.

Design:
    - Entries are populated lazily: a miss scrapes the whole page and inserts
      every symbol found, not only the one asked for.
    - ``_lock`` guards the entry dict; ``_refresh_lock`` lets only one thread
      scrape at a time. A thread that waited on the refresh lock re-checks the
      cache before scraping again.
    - Writes are idempotent inserts; overlapping refreshes are last-write-wins.
"""

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _CacheEntry:
    price: Decimal
    fetched_at: datetime


class ScrapeCache:
    """TTL-bound symbol -> price map, refreshed from a listing source."""

    def __init__(self, ttl_seconds: int, clock: Clock = _utcnow):
        if ttl_seconds <= 0:
            raise ValueError("cache ttl must be positive seconds")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._refresh_lock = threading.Lock()

    # Internal --------------------------------------------------
    def _is_entry_valid(self, entry: _CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self._ttl

    # Public API -----------------------------------------------
    def get(self, symbol: str) -> Optional[Decimal]:
        symbol = symbol.upper()
        with self._lock:
            entry = self._entries.get(symbol)
            if entry is None:
                return None
            if not self._is_entry_valid(entry):
                self._entries.pop(symbol, None)
                return None
            return entry.price

    def put_many(self, prices: Dict[str, Decimal]) -> None:
        now = self._clock()
        with self._lock:
            for symbol, price in prices.items():
                self._entries[symbol.upper()] = _CacheEntry(price=price, fetched_at=now)

    def snapshot(self) -> Dict[str, Dict[str, str]]:
        with self._lock:
            return {
                s: {"price": str(e.price), "fetched_at": e.fetched_at.isoformat()}
                for s, e in sorted(self._entries.items())
                if self._is_entry_valid(e)
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_scrape(self, symbol: str, source: SupportsListing) -> Decimal:
        """Cached price for ``symbol``; scrapes ``source`` on a miss.

        Raises SymbolNotFound if the symbol is still absent after a fresh scrape.
        """
        symbol = symbol.upper()
        price = self.get(symbol)
        if price is not None:
            return price
        with self._refresh_lock:
            # Another worker may have refreshed while we waited.
            price = self.get(symbol)
            if price is not None:
                return price
            logger.info("scrape cache miss for %s, refreshing listing", symbol)
            self.put_many(source.fetch_listing())
        price = self.get(symbol)
        if price is None:
            raise SymbolNotFound(symbol, source=source.label)
        return price
