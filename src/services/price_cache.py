from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping

from .errors import InvalidSample, StalePriceError
from .price_types import CachedPrice

DEFAULT_RATE = Decimal("1.0")


@dataclass(frozen=True)
class _Snapshot:
    price: Decimal | None
    fetched_at: float | None
    source: str | None
    rates: Mapping[str, Decimal]


class PriceCache:
    """Last known good price plus exchange rates, served while younger than the freshness window.

    Every write swaps one immutable snapshot, so a reader always sees a price
    together with the fetch time of the same update. Rates for the configured
    currencies start at 1.0 and go back to 1.0 on ``reset_rates``.
    """

    def __init__(
        self,
        *,
        freshness_window: float,
        rate_currencies: Iterable[str] = (),
        time_source: Callable[[], float] | None = None,
    ) -> None:
        if freshness_window <= 0:
            msg = "freshness_window must be > 0"
            raise ValueError(msg)

        self.freshness_window = float(freshness_window)
        self.rate_currencies = tuple(dict.fromkeys(code.upper() for code in rate_currencies))
        self.time_source = time_source or time.monotonic
        self._lock = threading.Lock()
        self._snapshot = _Snapshot(price=None, fetched_at=None, source=None, rates=self._default_rates())

    @property
    def price(self) -> Decimal | None:
        return self._snapshot.price

    @property
    def last_fetch_time(self) -> float | None:
        return self._snapshot.fetched_at

    @property
    def exchange_rates(self) -> dict[str, Decimal]:
        return dict(self._snapshot.rates)

    def is_fresh(self, now: float | None = None) -> bool:
        return self._is_fresh(self._snapshot, self._now(now))

    def get(self, now: float | None = None) -> CachedPrice:
        snapshot = self._snapshot
        if not self._is_fresh(snapshot, self._now(now)):
            raise StalePriceError("Cached price is unset or older than the freshness window")
        assert snapshot.price is not None and snapshot.fetched_at is not None
        return CachedPrice(
            price=snapshot.price,
            fetched_at=snapshot.fetched_at,
            source=snapshot.source,
            exchange_rates=dict(snapshot.rates),
        )

    def set(
        self,
        price: Decimal,
        rates: Mapping[str, Decimal] | None = None,
        now: float | None = None,
        *,
        source: str | None = None,
    ) -> None:
        validated_price = self._validate_positive(price, field="price", source=source)
        validated_rates = self._validate_rates(rates, source=source) if rates is not None else None
        fetched_at = self._now(now)
        with self._lock:
            self._snapshot = _Snapshot(
                price=validated_price,
                fetched_at=fetched_at,
                source=source,
                rates=validated_rates if validated_rates is not None else self._snapshot.rates,
            )

    def set_rates(self, rates: Mapping[str, Decimal], *, source: str | None = None) -> None:
        validated = self._validate_rates(rates, source=source)
        with self._lock:
            self._snapshot = _replace_rates(self._snapshot, validated)

    def reset_rates(self) -> None:
        with self._lock:
            self._snapshot = _replace_rates(self._snapshot, self._default_rates())

    def _now(self, now: float | None) -> float:
        return self.time_source() if now is None else now

    def _is_fresh(self, snapshot: _Snapshot, now: float) -> bool:
        if snapshot.price is None or snapshot.fetched_at is None:
            return False
        return now - snapshot.fetched_at < self.freshness_window

    def _default_rates(self) -> dict[str, Decimal]:
        return {code: DEFAULT_RATE for code in self.rate_currencies}

    def _validate_rates(self, rates: Mapping[str, Decimal], *, source: str | None) -> dict[str, Decimal]:
        normalized = {code.upper(): value for code, value in rates.items()}
        validated: dict[str, Decimal] = {}
        for code in self.rate_currencies:
            if code not in normalized:
                raise InvalidSample(f"Exchange rate for {code} missing", source=source, payload=dict(rates))
            validated[code] = self._validate_positive(normalized[code], field=f"{code} rate", source=source)
        return validated

    @staticmethod
    def _validate_positive(value: Any, *, field: str, source: str | None) -> Decimal:
        try:
            parsed = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidSample(f"{field} is not a number: {value!r}", source=source, payload=value) from exc
        if not parsed.is_finite() or parsed <= 0:
            msg = f"{field} must be a positive finite number, got {value!r}"
            raise InvalidSample(msg, source=source, payload=value)
        return parsed


def _replace_rates(snapshot: _Snapshot, rates: Mapping[str, Decimal]) -> _Snapshot:
    return _Snapshot(price=snapshot.price, fetched_at=snapshot.fetched_at, source=snapshot.source, rates=rates)


__all__ = ["DEFAULT_RATE", "PriceCache"]
