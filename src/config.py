from __future__ import annotations

from functools import cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    asset_symbol: str = "SOL"
    coingecko_coin_id: str = "solana"

    cache_ttl_seconds: float = Field(default=600, gt=0)
    refresh_interval_seconds: float = Field(default=600, gt=0)
    skip_if_fresh: bool = False

    rate_limit_enabled: bool = True
    rate_limit: int = Field(default=60, gt=0)
    rate_limit_window_seconds: float = Field(default=60, gt=0)

    price_sources: list[str] = ["coingecko", "binance"]
    rate_sources: list[str] = []
    rate_base_currency: str = "GBP"
    rate_currencies: list[str] = ["GBP", "EUR", "CAD", "JPY", "CNY"]
    exchange_rates_layout: Literal["nested", "flat"] = "nested"

    coinmarketcap_api_key: str | None = None
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    retry_attempts: int = Field(default=0, ge=0)
    retry_backoff_seconds: float = Field(default=1.0, ge=0)

    cors_origin_regex: str = r"chrome-extension://.*"
    liveness_message: str = "Solify It Proxy Server is running!"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@cache
def config() -> AppSettings:
    return AppSettings()
