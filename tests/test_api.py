"""Tests for the HTTP surface."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from quotebot.main import create_app
from tests.conftest import COINCAP


@pytest.fixture
def client(settings, dispatcher):
    app = create_app(settings_override=settings, dispatcher=dispatcher)
    return TestClient(app, raise_server_exceptions=False)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0"}


def test_pair_quote(client):
    resp = client.get("/quotes/BTC", params={"second": "EUR", "amount": "2"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["unit_price"] == "18000.00"
    assert data["total"] == "36000.00"
    assert data["text"] == "2 BTC = €36000.00"


def test_unknown_symbol_is_404(client):
    resp = client.get("/quotes/NOPE")
    assert resp.status_code == 404
    assert resp.json()["error"] == "symbol_not_found"


def test_upstream_error_is_502(client, fetcher):
    fetcher.responses[f"{COINCAP}/BTC"] = b"[1, 2, 3]"
    resp = client.get("/quotes/BTC")
    assert resp.status_code == 502
    assert resp.json()["error"] == "unparseable_response"


def test_listed_quote_and_cache(client):
    assert client.get("/quotes/cache").json() == {}
    resp = client.get("/quotes/listed/jmmbgl")
    assert resp.status_code == 200
    assert resp.json()["source"] == "https://www.jamstockex.com"
    assert set(client.get("/quotes/cache").json()) == {"NCBFG", "JMMBGL", "GK"}


def test_command_endpoint(client):
    resp = client.post("/commands", json={"text": "/quote BTC"})
    assert resp.json() == {"reply": "1 BTC = US$20000.50"}
    resp = client.post("/commands", json={"text": "hello there how are you"})
    assert resp.json() == {"reply": None}
