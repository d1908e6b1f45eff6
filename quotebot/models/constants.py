"""Fixed lookup tables and reply texts.

Kept as plain mappings; membership in FIAT_FIELDS is what routes a pair to the
fiat-denominated price service.
"""

from typing import Dict

# Fiat code -> field of the coincap page payload carrying that currency's price
FIAT_FIELDS: Dict[str, str] = {
    "USD": "price_usd",
    "EUR": "price_eur",
}

DEFAULT_CURRENCY = "USD"

# Ticker crossed through when both sides of a pair are fiat
CROSS_BASE_TICKER = "BTC"

SYMBOLS: Dict[str, str] = {
    "USD": "US$",
    "EUR": "€",
    "JMD": "J$",
    "BTC": "฿",
    "ETH": "Ξ",
    "LTC": "Ł",
}

# Human-readable names of the upstreams, used in replies and source lines
COINCAP_LABEL = "https://coincap.io"
SHAPESHIFT_LABEL = "https://shapeshift.io"
CEX_LABEL = "https://cex.io"
JSE_LABEL = "https://www.jamstockex.com"

WELCOME_MESSAGE = (
    "Ask me for prices with /quote (ticker). Example: /quote BTC\n"
    "You can also just send a ticker, e.g. ETH or ETH EUR."
)

HELP_MESSAGE = (
    "Use me to get prices of coins and stocks.\n"
    "/quote (ticker) [currency] - e.g. /quote BTC or /quote BTC EUR\n"
    "/convert (amount) (from) (to) - e.g. /convert 100 USD BTC\n"
    "/cex (ticker) [currency] - last trade on cex.io, e.g. /cex ETH\n"
    "/jse (symbol) - Jamaica Stock Exchange quote, e.g. /jse NCBFG\n"
    "/source - where the prices come from"
)

SOURCE_MESSAGE = (
    "Prices come from:\n"
    f"- {COINCAP_LABEL} for coins quoted in USD/EUR\n"
    f"- {SHAPESHIFT_LABEL} for coin to coin rates\n"
    f"- {CEX_LABEL} for /cex quotes\n"
    f"- {JSE_LABEL} for /jse quotes (refreshed every few minutes)"
)

GENERIC_ERROR_MESSAGE = "Sorry, something went wrong. Try again later."
