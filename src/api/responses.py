from __future__ import annotations

from decimal import Decimal
from typing import Any

from services.price_types import CachedPrice

PRICE_UNAVAILABLE = {"error": "Price not available, please try again later."}
RATE_LIMITED = {"error": "Rate limit exceeded, please try again later."}


def rate_key(currency: str) -> str:
    """``GBP`` -> ``gbpToUsdRate``."""
    return f"{currency.lower()}ToUsdRate"


def render_price(cached: CachedPrice, *, exchange_rates_layout: str = "nested") -> dict[str, Any]:
    body: dict[str, Any] = {"usd": _to_number(cached.price)}
    if not cached.exchange_rates:
        return body

    rates = {rate_key(code): _to_number(value) for code, value in cached.exchange_rates.items()}
    if exchange_rates_layout == "flat":
        body.update(rates)
    else:
        body["exchangeRates"] = rates
    return body


def _to_number(value: Decimal) -> float:
    return float(value)
