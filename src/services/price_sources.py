from __future__ import annotations

from typing import Protocol

from .price_types import PriceSample, RatesSample


class PriceSource(Protocol):
    source_name: str

    def fetch_price(self) -> PriceSample: ...


class RatesSource(Protocol):
    source_name: str

    def fetch_rates(self) -> RatesSample: ...


__all__ = [
    "PriceSource",
    "RatesSource",
]
