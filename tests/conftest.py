from __future__ import annotations

import pytest

from services.price_cache import PriceCache
from services.rate_limiter import FixedWindowRateLimiter
from tests.helpers.fake_time import FakeTime

RATE_CURRENCIES = ("GBP", "EUR", "CAD", "JPY", "CNY")


@pytest.fixture(scope="function")
def fake_time() -> FakeTime:
    return FakeTime(start=10_000.0)


@pytest.fixture(scope="function")
def price_cache(fake_time: FakeTime) -> PriceCache:
    return PriceCache(freshness_window=600, time_source=fake_time)


@pytest.fixture(scope="function")
def rates_cache(fake_time: FakeTime) -> PriceCache:
    return PriceCache(freshness_window=600, rate_currencies=RATE_CURRENCIES, time_source=fake_time)


@pytest.fixture(scope="function")
def rate_limiter(fake_time: FakeTime) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(limit=60, window_seconds=60, time_source=fake_time)
