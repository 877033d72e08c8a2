from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class PriceSample:
    """USD price reported by one upstream."""

    price: Decimal
    source: str


@dataclass(frozen=True)
class RatesSample:
    """Cross rates quoted relative to ``base`` (1 base = rate units of the currency)."""

    base: str
    rates: dict[str, Decimal]
    source: str


@dataclass(frozen=True)
class CachedPrice:
    price: Decimal
    fetched_at: float
    source: str | None = None
    exchange_rates: dict[str, Decimal] = field(default_factory=dict)


__all__ = ["CachedPrice", "PriceSample", "RatesSample"]
