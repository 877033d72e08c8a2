from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import requests

from config import AppSettings

from .binance_source import BinanceSource
from .coingecko_source import CoinGeckoSource
from .coinmarketcap_source import CoinMarketCapSource
from .exchange_rate_api_source import ExchangeRateApiSource
from .fetch_orchestrator import FetchOrchestrator
from .frankfurter_source import FrankfurterSource
from .http_client import UpstreamClient
from .kucoin_source import KuCoinSource
from .price_cache import PriceCache
from .price_sources import PriceSource, RatesSource
from .rate_limiter import FixedWindowRateLimiter
from .scheduler import RefreshScheduler

_ClientFactory = Callable[[str], UpstreamClient]


@dataclass
class PriceService:
    """Process-wide collaborators shared by the HTTP handlers and the refresh timer."""

    cache: PriceCache
    orchestrator: FetchOrchestrator
    rate_limiter: FixedWindowRateLimiter | None = None
    scheduler: RefreshScheduler | None = None
    exchange_rates_layout: str = "nested"


def _price_source(name: str, settings: AppSettings, client_for: _ClientFactory) -> PriceSource:
    key = name.strip().lower()
    if key == "coingecko":
        return CoinGeckoSource(coin_id=settings.coingecko_coin_id, client=client_for("coingecko"))
    if key == "binance":
        return BinanceSource(asset_symbol=settings.asset_symbol, client=client_for("binance"))
    if key == "kucoin":
        return KuCoinSource(asset_symbol=settings.asset_symbol, client=client_for("kucoin"))
    if key == "coinmarketcap":
        if not settings.coinmarketcap_api_key:
            msg = "coinmarketcap source requires COINMARKETCAP_API_KEY"
            raise ValueError(msg)
        return CoinMarketCapSource(
            api_key=settings.coinmarketcap_api_key,
            asset_symbol=settings.asset_symbol,
            client=client_for("coinmarketcap"),
        )
    msg = f"Unknown price source: {name!r}"
    raise ValueError(msg)


def _rates_source(name: str, settings: AppSettings, client_for: _ClientFactory) -> RatesSource:
    key = name.strip().lower()
    if key == "frankfurter":
        return FrankfurterSource(
            base_currency=settings.rate_base_currency,
            quote_currencies=settings.rate_currencies,
            client=client_for("frankfurter"),
        )
    if key == "exchangerate-api":
        return ExchangeRateApiSource(
            base_currency=settings.rate_base_currency,
            quote_currencies=settings.rate_currencies,
            client=client_for("exchangerate-api"),
        )
    msg = f"Unknown exchange-rate source: {name!r}"
    raise ValueError(msg)


def _client_factory(settings: AppSettings, session: requests.Session) -> _ClientFactory:
    def client_for(source_name: str) -> UpstreamClient:
        return UpstreamClient(
            source_name=source_name,
            timeout=settings.request_timeout_seconds,
            session=session,
            retry_attempts=settings.retry_attempts,
            retry_backoff_seconds=settings.retry_backoff_seconds,
        )

    return client_for


def build_price_sources(settings: AppSettings, session: requests.Session | None = None) -> list[PriceSource]:
    client_for = _client_factory(settings, session or requests.Session())
    return [_price_source(name, settings, client_for) for name in settings.price_sources]


def build_rate_sources(settings: AppSettings, session: requests.Session | None = None) -> list[RatesSource]:
    client_for = _client_factory(settings, session or requests.Session())
    return [_rates_source(name, settings, client_for) for name in settings.rate_sources]


def build_default_service(
    settings: AppSettings,
    *,
    session: requests.Session | None = None,
    with_scheduler: bool = True,
) -> PriceService:
    http_session = session or requests.Session()
    rate_sources = build_rate_sources(settings, http_session)
    cache = PriceCache(
        freshness_window=settings.cache_ttl_seconds,
        rate_currencies=settings.rate_currencies if rate_sources else (),
    )
    orchestrator = FetchOrchestrator(
        cache=cache,
        price_sources=build_price_sources(settings, http_session),
        rate_sources=rate_sources,
        skip_if_fresh=settings.skip_if_fresh,
    )
    rate_limiter = (
        FixedWindowRateLimiter(limit=settings.rate_limit, window_seconds=settings.rate_limit_window_seconds)
        if settings.rate_limit_enabled
        else None
    )
    scheduler = (
        RefreshScheduler(orchestrator.refresh, interval_seconds=settings.refresh_interval_seconds)
        if with_scheduler
        else None
    )
    return PriceService(
        cache=cache,
        orchestrator=orchestrator,
        rate_limiter=rate_limiter,
        scheduler=scheduler,
        exchange_rates_layout=settings.exchange_rates_layout,
    )


__all__ = ["PriceService", "build_default_service", "build_price_sources", "build_rate_sources"]
