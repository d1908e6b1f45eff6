from __future__ import annotations

import json
from typing import Dict, List, Union

import pytest

from quotebot.bot.handlers import Dispatcher, build_dispatcher
from quotebot.core.config import Settings
from quotebot.services.http_client import HttpError
from quotebot.services.quotes.providers import PriceSources, make_price_sources

COINCAP = "https://coincap.io/page"
SHAPESHIFT = "https://shapeshift.io/marketinfo"
CEX = "https://cex.io/api/ticker"
LISTING = "https://www.jamstockex.com/trading/trade-quotes/"

LISTING_HTML = """
<html><body>
<table class="quotes">
  <tr><th>Symbol</th><th>Volume</th><th>Last Price ($)</th><th>Change</th></tr>
  <tr><td>NCBFG <span>NCB Financial Group</span></td><td>12,400</td><td>$75.10</td><td>+0.10</td></tr>
  <tr><td>JMMBGL</td><td>3,000</td><td>38.55</td><td>-0.45</td></tr>
  <tr><td>GK</td><td>900</td><td>J$ 1,020.00</td><td>0.00</td></tr>
  <tr><td colspan="4">Suspended</td></tr>
  <tr><td>XYZ</td><td>0</td><td>-</td><td>-</td></tr>
</table>
</body></html>
"""

Response = Union[bytes, Exception]


class FakeFetcher:
    """Stands in for http_client.fetch: URL -> canned body, records calls."""

    def __init__(self, responses: Dict[str, Response] | None = None):
        self.responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[str] = []

    def set_json(self, url: str, payload) -> None:
        self.responses[url] = json.dumps(payload).encode()

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            raise HttpError(f"HTTP 404 for {url}", status=404)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def settings() -> Settings:
    s = Settings(telegram_bot_token=None, worker_count=2, _env_file=None)
    s.init_post_load()
    return s


@pytest.fixture
def fetcher() -> FakeFetcher:
    f = FakeFetcher()
    f.set_json(f"{COINCAP}/BTC", {"id": "BTC", "price_usd": 20000.5, "price_eur": 18000})
    f.set_json(f"{COINCAP}/ETH", {"id": "ETH", "price_usd": 0.5, "price_eur": 0.45})
    f.responses[f"{COINCAP}/NOPE"] = b"{}"
    f.set_json(f"{SHAPESHIFT}/eth_btc", {"pair": "ETH_BTC", "rate": "0.05123"})
    f.set_json(f"{SHAPESHIFT}/btc_zzz", {"error": "That pair is temporarily unavailable for trades."})
    f.set_json(f"{CEX}/BTC/USD", {"timestamp": "1700000000", "last": "20100.1", "volume": "12.5"})
    f.set_json(f"{CEX}/FOO/USD", {"error": "Invalid Symbols Pair"})
    f.responses[LISTING] = LISTING_HTML.encode()
    return f


@pytest.fixture
def sources(settings: Settings, fetcher: FakeFetcher) -> PriceSources:
    return make_price_sources(settings, fetcher)


@pytest.fixture
def dispatcher(settings: Settings, sources: PriceSources) -> Dispatcher:
    return build_dispatcher(settings, sources)
