from __future__ import annotations

from decimal import Decimal

import pytest

from services.errors import InvalidSample, StalePriceError
from services.price_cache import PriceCache
from tests.helpers.fake_time import FakeTime


def test_cold_cache_is_stale(price_cache: PriceCache) -> None:
    assert not price_cache.is_fresh()
    assert price_cache.price is None
    assert price_cache.last_fetch_time is None
    with pytest.raises(StalePriceError):
        price_cache.get()


def test_get_returns_value_inside_freshness_window(price_cache: PriceCache, fake_time: FakeTime) -> None:
    price_cache.set(Decimal("150.23"), source="coingecko")
    fetched_at = fake_time()

    fake_time.advance(599.999)
    cached = price_cache.get()

    assert cached.price == Decimal("150.23")
    assert cached.fetched_at == fetched_at
    assert cached.source == "coingecko"
    assert cached.exchange_rates == {}


def test_freshness_boundary_is_already_stale(price_cache: PriceCache) -> None:
    price_cache.set(Decimal("10"), now=100.0)

    assert price_cache.is_fresh(now=699.9)
    assert not price_cache.is_fresh(now=700.0)
    with pytest.raises(StalePriceError):
        price_cache.get(now=700.0)


@pytest.mark.parametrize("bad_price", [Decimal("0"), Decimal("-1.5"), Decimal("NaN"), Decimal("Infinity"), "abc"])
def test_set_rejects_invalid_price_and_keeps_previous_state(price_cache: PriceCache, bad_price: object) -> None:
    price_cache.set(Decimal("20.5"), now=1.0)

    with pytest.raises(InvalidSample):
        price_cache.set(bad_price, now=2.0)  # type: ignore[arg-type]

    assert price_cache.price == Decimal("20.5")
    assert price_cache.last_fetch_time == 1.0


def test_rates_default_to_one_and_reset(rates_cache: PriceCache) -> None:
    assert rates_cache.exchange_rates == {code: Decimal("1.0") for code in ("GBP", "EUR", "CAD", "JPY", "CNY")}

    rates_cache.set_rates({"gbp": Decimal("1.27"), "EUR": Decimal("1.0855"), "CAD": "0.7427", "JPY": 0.0067, "CNY": 1})
    assert rates_cache.exchange_rates["GBP"] == Decimal("1.27")
    assert rates_cache.exchange_rates["JPY"] == Decimal("0.0067")

    rates_cache.reset_rates()
    assert set(rates_cache.exchange_rates.values()) == {Decimal("1.0")}


def test_set_rates_does_not_touch_price_or_fetch_time(rates_cache: PriceCache) -> None:
    rates_cache.set(Decimal("100"), now=5.0)

    rates_cache.set_rates({code: Decimal("2") for code in rates_cache.rate_currencies})

    assert rates_cache.price == Decimal("100")
    assert rates_cache.last_fetch_time == 5.0


def test_set_rates_rejects_incomplete_mapping(rates_cache: PriceCache) -> None:
    with pytest.raises(InvalidSample):
        rates_cache.set_rates({"GBP": Decimal("1.27")})
    assert set(rates_cache.exchange_rates.values()) == {Decimal("1.0")}


def test_set_with_rates_updates_everything_together(rates_cache: PriceCache) -> None:
    rates = {code: Decimal("3") for code in rates_cache.rate_currencies}

    rates_cache.set(Decimal("99.99"), rates=rates, now=50.0)
    cached = rates_cache.get(now=51.0)

    assert cached.price == Decimal("99.99")
    assert cached.exchange_rates == rates


def test_get_returns_copy_of_rates(rates_cache: PriceCache) -> None:
    rates_cache.set(Decimal("1"), now=0.0)
    cached = rates_cache.get(now=1.0)
    cached.exchange_rates["GBP"] = Decimal("999")

    assert rates_cache.exchange_rates["GBP"] == Decimal("1.0")


def test_freshness_window_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PriceCache(freshness_window=0)
