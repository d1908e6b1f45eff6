from decimal import Decimal

import pytest

from quotebot.services.quotes.listing import parse_listing, parse_price, parse_row


@pytest.mark.parametrize(
    "text,expected",
    [("75.10", "75.10"), ("$1,020.00", "1020.00"), ("J$ 3.5", "3.5")],
)
def test_parse_price(text, expected):
    assert parse_price(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", "-", "n/a", "0.00"])
def test_parse_price_rejects(text):
    with pytest.raises(ValueError):
        parse_price(text)


def test_parse_row_takes_first_word_of_symbol_cell():
    assert parse_row(["wisynco  Wisynco Group", "10", "21.00"]) == ("WISYNCO", Decimal("21.00"))


def test_parse_row_short_row():
    with pytest.raises(IndexError):
        parse_row(["NCBFG"])


def test_parse_listing_unclosed_tags():
    html = "<table><tr><td>CAR<td>1<td>9.90<tr><td>LASM<td>2<td>4.10</table>"
    assert parse_listing(html) == {"CAR": Decimal("9.90"), "LASM": Decimal("4.10")}
