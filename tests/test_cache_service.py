import threading
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from quotebot.core.errors import SymbolNotFound
from quotebot.services.quotes.cache_service import ScrapeCache


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class CountingListing:
    label = "https://www.jamstockex.com"

    def __init__(self, prices, delay=0.0):
        self.prices = prices
        self.delay = delay
        self.calls = 0

    def fetch_listing(self):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return dict(self.prices)


@pytest.fixture
def clock():
    return FakeClock()


def test_miss_populates_every_symbol(clock):
    cache = ScrapeCache(60, clock=clock)
    listing = CountingListing({"NCBFG": Decimal("75.1"), "GK": Decimal("1020")})
    assert cache.get_or_scrape("ncbfg", listing) == Decimal("75.1")
    assert cache.get("GK") == Decimal("1020")
    assert listing.calls == 1


def test_hit_within_ttl_does_not_fetch(clock):
    cache = ScrapeCache(60, clock=clock)
    listing = CountingListing({"NCBFG": Decimal("75.1")})
    cache.get_or_scrape("NCBFG", listing)
    clock.advance(59)
    cache.get_or_scrape("NCBFG", listing)
    assert listing.calls == 1


def test_expiry_refetches(clock):
    cache = ScrapeCache(60, clock=clock)
    listing = CountingListing({"NCBFG": Decimal("75.1")})
    cache.get_or_scrape("NCBFG", listing)
    clock.advance(60)
    assert cache.get("NCBFG") is None
    listing.prices["NCBFG"] = Decimal("76")
    assert cache.get_or_scrape("NCBFG", listing) == Decimal("76")
    assert listing.calls == 2


def test_absent_after_fresh_scrape(clock):
    cache = ScrapeCache(60, clock=clock)
    listing = CountingListing({"NCBFG": Decimal("75.1")})
    with pytest.raises(SymbolNotFound) as exc:
        cache.get_or_scrape("NOPE", listing)
    assert "NOPE" in exc.value.user_message()
    assert listing.calls == 1


def test_snapshot_hides_expired(clock):
    cache = ScrapeCache(60, clock=clock)
    cache.put_many({"A1": Decimal("1")})
    clock.advance(30)
    cache.put_many({"B2": Decimal("2")})
    clock.advance(31)
    assert list(cache.snapshot()) == ["B2"]


def test_invalid_ttl():
    with pytest.raises(ValueError):
        ScrapeCache(0)


def test_concurrent_misses_scrape_once():
    cache = ScrapeCache(60)
    listing = CountingListing({"NCBFG": Decimal("75.1")}, delay=0.05)
    results = []

    def lookup():
        results.append(cache.get_or_scrape("NCBFG", listing))

    threads = [threading.Thread(target=lookup) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == [Decimal("75.1")] * 8
    assert listing.calls == 1
