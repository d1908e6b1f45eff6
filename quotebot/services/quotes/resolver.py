from __future__ import annotations

"""Quote resolution: pick the authoritative source for a pair and build a Quote.

Routing rules:
    - any fiat side (FIAT_FIELDS)  -> coincap price record of the coin side
    - no fiat side                 -> shapeshift rate for ``first_second``
    - /cex                         -> cex.io last trade for ``FIRST/SECOND``
    - /jse                         -> scraped listing via the scrape cache

Buying coins with fiat is quoted net of a fixed fee fraction, so converting
fiat into a coin inverts the coin price and deducts the fee.
"""
import logging
from decimal import Decimal

from quotebot.models.constants import CROSS_BASE_TICKER, FIAT_FIELDS
from quotebot.models.quote import ONE, Quote
from .cache_service import ScrapeCache
from .providers import PriceSources

logger = logging.getLogger("quotebot.quotes")


def is_fiat(ticker: str) -> bool:
    return ticker in FIAT_FIELDS


class QuoteResolver:
    def __init__(
        self,
        sources: PriceSources,
        cache: ScrapeCache,
        *,
        fee_fraction: float = 0.007,
        listing_currency: str = "JMD",
    ):
        self._sources = sources
        self._cache = cache
        self._net_of_fee = ONE - Decimal(str(fee_fraction))
        self._listing_currency = listing_currency

    @property
    def cache(self) -> ScrapeCache:
        return self._cache

    def _quote(
        self,
        first: str,
        second: str,
        unit_price: Decimal,
        amount: Decimal | None,
        source_label: str | None = None,
    ) -> Quote:
        return Quote(
            first=first,
            second=second,
            unit_price=unit_price,
            amount=ONE if amount is None else amount,
            source_label=source_label,
            amount_requested=amount is not None,
        )

    # Fiat / coin ----------------------------------------------
    def _fiat_unit_price(self, first: str, second: str) -> Decimal:
        coincap = self._sources.coincap
        if is_fiat(first) and is_fiat(second):
            if first == second:
                return ONE
            base_in_first = coincap.price_in(CROSS_BASE_TICKER, first)
            base_in_second = coincap.price_in(CROSS_BASE_TICKER, second)
            return base_in_second / base_in_first
        if is_fiat(second):
            return coincap.price_in(first, second)
        # fiat -> coin
        return self._net_of_fee / coincap.price_in(second, first)

    def resolve(self, first: str, second: str, amount: Decimal | None = None) -> Quote:
        """Quote ``first`` in ``second``; ``amount=None`` means no explicit amount."""
        first, second = first.upper(), second.upper()
        if is_fiat(first) or is_fiat(second):
            unit = self._fiat_unit_price(first, second)
            route = "coincap"
        else:
            unit = self._sources.shapeshift.fetch_raw_price(f"{first}_{second}")
            route = "shapeshift"
        logger.info("resolved %s/%s via %s: %s", first, second, route, unit)
        return self._quote(first, second, unit, amount)

    # Exchange-specific ----------------------------------------
    def resolve_exchange(
        self, first: str, second: str, amount: Decimal | None = None
    ) -> Quote:
        first, second = first.upper(), second.upper()
        cex = self._sources.cex
        unit = cex.fetch_raw_price(f"{first}/{second}")
        logger.info("resolved %s/%s via cex: %s", first, second, unit)
        return self._quote(first, second, unit, amount, cex.label)

    def resolve_listed(self, symbol: str, amount: Decimal | None = None) -> Quote:
        symbol = symbol.upper()
        listing = self._sources.listing
        unit = self._cache.get_or_scrape(symbol, listing)
        return self._quote(symbol, self._listing_currency, unit, amount, listing.label)
