from __future__ import annotations

"""Concrete price sources and factory.

One adapter per upstream:

- ``CoinCapSource``: coin price record by ticker, priced in several currencies.
- ``ShapeShiftSource``: coin-to-coin rate by ``first_second`` pair.
- ``CexTickerSource``: last trade on a centralized exchange by ``FIRST/SECOND``.
- ``ListingSource``: scraped HTML listing of stock prices.
"""
import logging
from decimal import Decimal
from functools import partial
from operator import attrgetter
from typing import Callable, Dict, Optional
from urllib.parse import quote

from pydantic import ValidationError

from quotebot.core.config import Settings
from quotebot.core.errors import (
    PairNotQuotable,
    SymbolNotFound,
    UnparseableResponse,
    UpstreamUnavailable,
)
from quotebot.models.constants import (
    CEX_LABEL,
    COINCAP_LABEL,
    FIAT_FIELDS,
    JSE_LABEL,
    SHAPESHIFT_LABEL,
)
from quotebot.models.upstream import CexTicker, CoinPage, ShapeShiftRate
from quotebot.services.http_client import HttpError, fetch
from .base import Fetcher, PriceSource
from .listing import parse_listing

logger = logging.getLogger("quotebot.quotes")

# coincap answers unknown tickers with 200 and an empty "{}" body
NOT_FOUND_BODY_LENGTH = 2

# Typed accessors for the per-currency price fields of a CoinPage
_FIAT_ACCESSORS: Dict[str, Callable[[CoinPage], Optional[Decimal]]] = {
    code: attrgetter(field) for code, field in FIAT_FIELDS.items()
}


def _join(base_url: str, *parts: str) -> str:
    """Append user-supplied path segments, escaped so they stay one segment each."""
    return "/".join([str(base_url).rstrip("/"), *(quote(p, safe="") for p in parts)])


class CoinCapSource(PriceSource):
    label = COINCAP_LABEL

    def __init__(self, fetcher: Fetcher, base_url: str):
        super().__init__(fetcher)
        self._base_url = base_url

    def fetch_raw_price(self, key: str) -> CoinPage:  # type: ignore[override]
        ticker = key.upper()
        try:
            body = self._fetch(_join(self._base_url, ticker))
        except HttpError as e:
            raise UpstreamUnavailable(ticker, str(e)) from e
        if len(body) == NOT_FOUND_BODY_LENGTH:
            raise SymbolNotFound(ticker, source=self.label)
        try:
            return CoinPage.model_validate_json(body)
        except ValidationError as e:
            raise UnparseableResponse(ticker, str(e)) from e

    def price_in(self, ticker: str, currency: str) -> Decimal:
        """Price of one ``ticker`` in fiat ``currency``."""
        accessor = _FIAT_ACCESSORS[currency]
        page = self.fetch_raw_price(ticker)
        value = accessor(page)
        if value is None:
            raise UnparseableResponse(
                ticker.upper(), f"no {FIAT_FIELDS[currency]} in response"
            )
        return value


class ShapeShiftSource(PriceSource):
    label = SHAPESHIFT_LABEL

    def __init__(self, fetcher: Fetcher, base_url: str):
        super().__init__(fetcher)
        self._base_url = base_url

    def fetch_raw_price(self, key: str) -> Decimal:  # type: ignore[override]
        pair = key.lower()
        subject = pair.upper().replace("_", "/")
        try:
            body = self._fetch(_join(self._base_url, pair))
        except HttpError as e:
            raise UpstreamUnavailable(subject, str(e)) from e
        try:
            info = ShapeShiftRate.model_validate_json(body)
        except ValidationError as e:
            raise UnparseableResponse(subject, str(e)) from e
        if info.error:
            raise PairNotQuotable(subject, info.error)
        if info.rate is None:
            raise UnparseableResponse(subject, "no rate in response")
        return info.rate


class CexTickerSource(PriceSource):
    label = CEX_LABEL

    def __init__(self, fetcher: Fetcher, base_url: str):
        super().__init__(fetcher)
        self._base_url = base_url

    def fetch_raw_price(self, key: str) -> Decimal:  # type: ignore[override]
        first, _, second = key.upper().partition("/")
        subject = f"{first}/{second}"
        try:
            body = self._fetch(_join(self._base_url, first, second))
        except HttpError as e:
            raise UpstreamUnavailable(subject, str(e)) from e
        try:
            ticker = CexTicker.model_validate_json(body)
        except ValidationError as e:
            raise UnparseableResponse(subject, str(e)) from e
        price = ticker.last_price
        if price is None:
            raise SymbolNotFound(subject, source=self.label, detail=ticker.error or "")
        return price


class ListingSource(PriceSource):
    label = JSE_LABEL

    def __init__(self, fetcher: Fetcher, url: str):
        super().__init__(fetcher)
        self._url = str(url)

    def fetch_listing(self) -> Dict[str, Decimal]:
        """Scrape the whole page; one bad row never fails the scrape."""
        try:
            body = self._fetch(self._url)
        except HttpError as e:
            raise UpstreamUnavailable("listing", str(e)) from e
        try:
            html = body.decode("utf-8", errors="replace")
            prices = parse_listing(html)
        except ValueError as e:
            raise UpstreamUnavailable("listing", f"page could not be parsed: {e}") from e
        if not prices:
            raise UpstreamUnavailable("listing", "no quote rows found on page")
        logger.info("scraped %d symbols from %s", len(prices), self._url)
        return prices

    def fetch_raw_price(self, key: str) -> Decimal:  # type: ignore[override]
        """Uncached single-symbol lookup: scrapes the whole page every call.

        Quote lookups go through ``ScrapeCache.get_or_scrape``, which calls
        ``fetch_listing`` on a miss; this is for one-off checks only.
        """
        symbol = key.upper()
        price = self.fetch_listing().get(symbol)
        if price is None:
            raise SymbolNotFound(symbol, source=self.label)
        return price


class PriceSources:
    """The four upstreams wired to one fetcher; built once per process."""

    def __init__(
        self,
        coincap: CoinCapSource,
        shapeshift: ShapeShiftSource,
        cex: CexTickerSource,
        listing: ListingSource,
    ):
        self.coincap = coincap
        self.shapeshift = shapeshift
        self.cex = cex
        self.listing = listing


def make_price_sources(settings: Settings, fetcher: Fetcher | None = None) -> PriceSources:
    if fetcher is None:
        fetcher = partial(fetch, timeout=settings.http_timeout_seconds)
    return PriceSources(
        coincap=CoinCapSource(fetcher, str(settings.coincap_base_url)),
        shapeshift=ShapeShiftSource(fetcher, str(settings.shapeshift_base_url)),
        cex=CexTickerSource(fetcher, str(settings.cex_base_url)),
        listing=ListingSource(fetcher, str(settings.listing_url)),
    )
