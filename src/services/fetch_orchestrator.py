from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, DivisionByZero, InvalidOperation
from typing import Callable, Sequence, TypeVar

from .errors import FetchError, InvalidResponse, InvalidSample
from .price_cache import PriceCache
from .price_sources import PriceSource, RatesSource
from .price_types import RatesSample

logger = logging.getLogger(__name__)

PRICE_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")

_T = TypeVar("_T")


@dataclass(frozen=True)
class ChainOutcome:
    source: str | None = None
    errors: tuple[tuple[str, FetchError], ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.source is not None


@dataclass(frozen=True)
class RefreshResult:
    skipped: bool = False
    price: ChainOutcome | None = None
    rates: ChainOutcome | None = None


def round_price(value: Decimal) -> Decimal:
    return value.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    return value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def normalize_to_usd(sample: RatesSample, currencies: Sequence[str]) -> dict[str, Decimal]:
    """Turn cross rates quoted against ``sample.base`` into "1 unit of X is worth N USD".

    With base B quoting ``B->USD`` and ``B->X``: ``X->USD = (B->USD) / (B->X)``.
    """
    base = sample.base.upper()
    rates = {code.upper(): value for code, value in sample.rates.items()}
    base_to_usd = Decimal("1") if base == "USD" else rates.get("USD")
    if base_to_usd is None:
        raise InvalidResponse(f"{sample.source} rates missing USD", source=sample.source, payload=sample.rates)

    normalized: dict[str, Decimal] = {}
    for code in (c.upper() for c in currencies):
        if code == base:
            base_to_code = Decimal("1")
        else:
            base_to_code = rates.get(code)
            if base_to_code is None:
                msg = f"{sample.source} rates missing {code}"
                raise InvalidResponse(msg, source=sample.source, payload=sample.rates)
        try:
            normalized[code] = round_rate(base_to_usd / base_to_code)
        except (DivisionByZero, InvalidOperation) as exc:
            msg = f"{sample.source} returned unusable rate for {code}"
            raise InvalidResponse(msg, source=sample.source, payload=sample.rates) from exc
    return normalized


class FetchOrchestrator:
    """Runs the price chain and the exchange-rate chain once per refresh cycle.

    Each chain tries its sources in order and stops at the first one whose
    sample is accepted. A failing price chain leaves the cached price alone;
    a failing rate chain resets every rate to 1.0.
    """

    def __init__(
        self,
        *,
        cache: PriceCache,
        price_sources: Sequence[PriceSource],
        rate_sources: Sequence[RatesSource] = (),
        skip_if_fresh: bool = False,
    ) -> None:
        if not price_sources:
            raise ValueError("price_sources must contain at least one source")
        if rate_sources and not cache.rate_currencies:
            raise ValueError("rate_sources require the cache to be configured with rate_currencies")
        self.cache = cache
        self.price_sources = tuple(price_sources)
        self.rate_sources = tuple(rate_sources)
        self.skip_if_fresh = skip_if_fresh

    def refresh(self, now: float | None = None) -> RefreshResult:
        current = self.cache.time_source() if now is None else now
        if self.skip_if_fresh and self.cache.is_fresh(current):
            logger.debug("Cached price still fresh, skipping refresh")
            return RefreshResult(skipped=True)

        price_outcome = self._refresh_price(current)
        rates_outcome = self._refresh_rates() if self.rate_sources else None
        return RefreshResult(price=price_outcome, rates=rates_outcome)

    def _refresh_price(self, now: float) -> ChainOutcome:
        def accept(source: PriceSource) -> None:
            sample = source.fetch_price()
            try:
                price = round_price(sample.price)
            except InvalidOperation as exc:
                msg = f"{sample.source} price cannot be rounded to cents: {sample.price!r}"
                raise InvalidSample(msg, source=sample.source, payload=str(sample.price)) from exc
            self.cache.set(price, now=now, source=sample.source)
            logger.info("Fetched price from %s: %s USD", sample.source, price)

        outcome = _run_chain("price", self.price_sources, accept)
        if not outcome.succeeded:
            logger.error(
                "All %d price sources failed, keeping previous cache state: %s",
                len(self.price_sources),
                _describe_errors(outcome.errors),
            )
        return outcome

    def _refresh_rates(self) -> ChainOutcome:
        def accept(source: RatesSource) -> None:
            sample = source.fetch_rates()
            rates = normalize_to_usd(sample, self.cache.rate_currencies)
            self.cache.set_rates(rates, source=sample.source)
            logger.info("Fetched exchange rates from %s: %s", sample.source, {k: str(v) for k, v in rates.items()})

        outcome = _run_chain("exchange-rate", self.rate_sources, accept)
        if not outcome.succeeded:
            logger.error(
                "All %d exchange-rate sources failed, resetting rates to 1.0: %s",
                len(self.rate_sources),
                _describe_errors(outcome.errors),
            )
            self.cache.reset_rates()
        return outcome


def _run_chain(kind: str, sources: Sequence[_T], accept: Callable[[_T], None]) -> ChainOutcome:
    errors: list[tuple[str, FetchError]] = []
    for source in sources:
        name = _source_name(source)
        logger.info("Fetching %s from %s", kind, name)
        try:
            accept(source)
        except FetchError as exc:
            logger.warning("Error fetching %s from %s: %s", kind, name, exc)
            errors.append((name, exc))
            continue
        return ChainOutcome(source=name, errors=tuple(errors))
    return ChainOutcome(source=None, errors=tuple(errors))


def _source_name(source: object) -> str:
    return str(getattr(source, "source_name", type(source).__name__))


def _describe_errors(errors: Sequence[tuple[str, FetchError]]) -> str:
    return "; ".join(f"{name}: {exc}" for name, exc in errors) or "no sources attempted"


__all__ = [
    "ChainOutcome",
    "FetchOrchestrator",
    "RefreshResult",
    "normalize_to_usd",
    "round_price",
    "round_rate",
]
