import os
from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., TELEGRAM_BOT_TOKEN,
    COINCAP_BASE_URL, SCRAPE_CACHE_TTL_SECONDS, WORKER_COUNT).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Crypto Prices Bot"
    debug: bool = False
    version: str = "0.1.0"

    # Chat transport
    telegram_bot_token: Optional[str] = None
    bot_name: str = "coincap_prices_bot"
    worker_count: int = 0  # 0 -> os.cpu_count()

    # Upstream price sources
    coincap_base_url: AnyHttpUrl = "https://coincap.io/page"
    shapeshift_base_url: AnyHttpUrl = "https://shapeshift.io/marketinfo"
    cex_base_url: AnyHttpUrl = "https://cex.io/api/ticker"
    listing_url: AnyHttpUrl = "https://www.jamstockex.com/trading/trade-quotes/"
    listing_currency: str = "JMD"
    http_timeout_seconds: float = 10.0

    # Scraped listing cache
    scrape_cache_ttl_seconds: int = 300

    # Quoting rules
    fee_fraction: float = 0.007
    implicit_quote_max_tokens: int = 2

    def init_post_load(self) -> None:
        """Finalize derived fields and validate ranges."""
        if self.worker_count <= 0:
            self.worker_count = os.cpu_count() or 1
        if self.scrape_cache_ttl_seconds <= 0:
            raise ValueError("scrape_cache_ttl_seconds must be positive")
        if not 0 <= self.fee_fraction < 1:
            raise ValueError(f"fee_fraction must be in [0, 1), got {self.fee_fraction}")
        self.listing_currency = self.listing_currency.upper()
        self.bot_name = self.bot_name.lstrip("@")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
