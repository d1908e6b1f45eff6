from unittest.mock import patch

import pytest

from quotebot.models.constants import (
    GENERIC_ERROR_MESSAGE,
    HELP_MESSAGE,
    SOURCE_MESSAGE,
    WELCOME_MESSAGE,
)
from quotebot.services.http_client import HttpError
from tests.conftest import COINCAP


def test_quote_btc_default_usd(dispatcher):
    assert dispatcher.handle("/quote BTC", is_command=True) == "1 BTC = US$20000.50"


def test_quote_small_price_in_eur(dispatcher):
    assert dispatcher.handle("/quote eth EUR", is_command=True) == "1 ETH = €0.45000000"


def test_convert_usd_to_btc(dispatcher, fetcher):
    fetcher.set_json(f"{COINCAP}/BTC", {"price_usd": 20000})
    assert dispatcher.handle("/convert 100 USD BTC", is_command=True) == "100 USD = ฿0.00496500"


def test_implicit_ticker(dispatcher):
    assert dispatcher.handle("BTC", is_command=False) == "1 BTC = US$20000.50"


def test_overlong_prose_is_ignored(dispatcher, fetcher):
    assert dispatcher.handle("I think BTC is going up", is_command=False) is None
    assert fetcher.calls == []


def test_blank_is_ignored(dispatcher):
    assert dispatcher.handle("  ", is_command=False) is None


@pytest.mark.parametrize(
    "text,expected",
    [
        ("/start", WELCOME_MESSAGE),
        ("/help", HELP_MESSAGE),
        ("/about", SOURCE_MESSAGE),
        ("/unknowncmd x", HELP_MESSAGE),
        ("/quote", HELP_MESSAGE),
        ("/convert 100 USD", HELP_MESSAGE),
        ("/convert lots USD BTC", HELP_MESSAGE),
        ("/convert -5 USD BTC", HELP_MESSAGE),
        ("/jse", HELP_MESSAGE),
    ],
)
def test_static_and_fallback_replies(dispatcher, text, expected):
    assert dispatcher.handle(text, is_command=True) == expected


def test_unknown_coin(dispatcher):
    assert dispatcher.handle("/quote NOPE", is_command=True) == "NOPE is not on https://coincap.io"


def test_upstream_down(dispatcher, fetcher):
    fetcher.responses[f"{COINCAP}/BTC"] = HttpError("HTTP 502", status=502)
    reply = dispatcher.handle("/quote BTC", is_command=True)
    assert reply == "Error retrieving BTC price, try again later"


def test_unreadable_upstream(dispatcher, fetcher):
    fetcher.responses[f"{COINCAP}/BTC"] = b"not json at all"
    assert dispatcher.handle("/quote BTC", is_command=True) == "Error decoding response for BTC"


def test_coin_pair_not_quotable(dispatcher):
    reply = dispatcher.handle("/quote BTC ZZZ", is_command=True)
    assert reply.startswith("Cannot quote BTC/ZZZ")


def test_cex_quote(dispatcher):
    assert dispatcher.handle("/cex btc", is_command=True) == "1 BTC = US$20100.10\nSource: https://cex.io"


def test_cex_pair_not_listed(dispatcher):
    assert dispatcher.handle("/cex FOO", is_command=True) == "FOO/USD is not on https://cex.io"


def test_jse_quote(dispatcher):
    reply = dispatcher.handle("/jse ncbfg", is_command=True)
    assert reply == "1 NCBFG = J$75.10\nSource: https://www.jamstockex.com"


def test_jse_symbol_missing(dispatcher):
    reply = dispatcher.handle("/jse NOPE", is_command=True)
    assert "NOPE" in reply
    assert reply == "NOPE is not on https://www.jamstockex.com"


def test_unexpected_failure_is_contained(dispatcher):
    with patch.object(dispatcher.resolver, "resolve", side_effect=RuntimeError("boom")):
        assert dispatcher.handle("/quote BTC", is_command=True) == GENERIC_ERROR_MESSAGE


def test_command_for_another_bot_gets_help(dispatcher, fetcher):
    assert dispatcher.handle("/quote@some_other_bot BTC", is_command=True) == HELP_MESSAGE
    assert fetcher.calls == []


def test_command_for_this_bot(dispatcher):
    reply = dispatcher.handle("/quote@coincap_prices_bot BTC", is_command=True)
    assert reply == "1 BTC = US$20000.50"


@pytest.mark.parametrize("amount", ["100000000000000000000000000000", "1e16"])
def test_huge_convert_amount_gets_help(dispatcher, fetcher, amount):
    assert dispatcher.handle(f"/convert {amount} BTC USD", is_command=True) == HELP_MESSAGE
    assert fetcher.calls == []


def test_largest_convert_amount(dispatcher):
    reply = dispatcher.handle("/convert 1000000000000000 BTC USD", is_command=True)
    assert reply == "1000000000000000 BTC = US$20000500000000000000.00"
