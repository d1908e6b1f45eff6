from __future__ import annotations

"""HTML listing page parsing for the scraped stock quote source.

The page is a table of trade quotes; each ``<tr>`` carries the symbol and the
last traded price at fixed cell positions. Rows that do not look like a quote
(headers, spacer rows, suspended symbols) are skipped.
"""
import logging
import re
from decimal import Decimal, InvalidOperation
from html.parser import HTMLParser
from typing import Dict, List, Optional

logger = logging.getLogger("quotebot.quotes")

SYMBOL_COLUMN = 0
PRICE_COLUMN = 2

_SYMBOL_RE = re.compile(r"^[A-Z][A-Z0-9.]{1,14}$")
_PRICE_JUNK_RE = re.compile(r"[^0-9.\-]")


class _RowCollector(HTMLParser):
    """Collects the text of every ``td``/``th`` cell, grouped per ``tr``."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.rows: List[List[str]] = []
        self._row: Optional[List[str]] = None
        self._cell: Optional[List[str]] = None

    def handle_starttag(self, tag, attrs):  # type: ignore[override]
        if tag == "tr":
            self._close_row()
            self._row = []
        elif tag in ("td", "th") and self._row is not None:
            self._close_cell()
            self._cell = []

    def handle_endtag(self, tag):  # type: ignore[override]
        if tag in ("td", "th"):
            self._close_cell()
        elif tag == "tr":
            self._close_row()

    def handle_data(self, data):  # type: ignore[override]
        if self._cell is not None:
            self._cell.append(data)

    def close(self) -> None:
        super().close()
        self._close_row()

    def _close_cell(self) -> None:
        if self._cell is not None and self._row is not None:
            self._row.append(" ".join("".join(self._cell).split()))
        self._cell = None

    def _close_row(self) -> None:
        self._close_cell()
        if self._row:
            self.rows.append(self._row)
        self._row = None


def parse_price(text: str) -> Decimal:
    cleaned = _PRICE_JUNK_RE.sub("", text)
    if not cleaned:
        raise ValueError(f"no number in {text!r}")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"bad price {text!r}") from e
    if not value.is_finite() or value <= 0:
        raise ValueError(f"non-positive price {text!r}")
    return value


def parse_row(
    cells: List[str],
    symbol_column: int = SYMBOL_COLUMN,
    price_column: int = PRICE_COLUMN,
) -> tuple[str, Decimal]:
    """Return ``(symbol, price)`` for one row; ValueError/IndexError when it is not a quote row."""
    raw_symbol = cells[symbol_column].split()
    if not raw_symbol:
        raise ValueError("empty symbol cell")
    symbol = raw_symbol[0].upper()
    if not _SYMBOL_RE.match(symbol):
        raise ValueError(f"not a symbol: {symbol!r}")
    return symbol, parse_price(cells[price_column])


def parse_listing(
    html: str,
    symbol_column: int = SYMBOL_COLUMN,
    price_column: int = PRICE_COLUMN,
) -> Dict[str, Decimal]:
    collector = _RowCollector()
    collector.feed(html)
    collector.close()
    prices: Dict[str, Decimal] = {}
    skipped = 0
    for cells in collector.rows:
        try:
            symbol, price = parse_row(cells, symbol_column, price_column)
        except (ValueError, IndexError):
            skipped += 1
            continue
        prices[symbol] = price
    logger.debug(
        "parsed listing: %d symbols, %d rows skipped", len(prices), skipped
    )
    return prices
