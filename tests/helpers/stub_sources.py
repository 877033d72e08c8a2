from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import Mock

from services.errors import FetchError, InvalidResponse, NetworkError
from services.price_types import PriceSample, RatesSample


class StubPriceSource:
    """Returns ``price`` or raises ``error``; either can be changed between calls."""

    def __init__(
        self,
        source_name: str,
        *,
        price: Decimal | str | None = None,
        error: FetchError | None = None,
    ) -> None:
        self.source_name = source_name
        self.price = Decimal(price) if isinstance(price, str) else price
        self.error = error
        self.calls = 0

    def succeed_with(self, price: str) -> None:
        self.price = Decimal(price)
        self.error = None

    def fail_with(self, error: FetchError | None = None) -> None:
        self.price = None
        self.error = error or NetworkError(f"{self.source_name} unreachable", source=self.source_name)

    def fetch_price(self) -> PriceSample:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.price is None:
            raise InvalidResponse(f"{self.source_name} payload missing price", source=self.source_name)
        return PriceSample(price=self.price, source=self.source_name)


def failing_price_source(source_name: str) -> StubPriceSource:
    source = StubPriceSource(source_name)
    source.fail_with()
    return source


class StubRatesSource:
    def __init__(
        self,
        source_name: str,
        *,
        base: str = "GBP",
        rates: dict[str, str] | None = None,
        error: FetchError | None = None,
    ) -> None:
        self.source_name = source_name
        self.base = base
        self.rates = {code: Decimal(value) for code, value in (rates or {}).items()}
        self.error = error
        self.calls = 0

    def fetch_rates(self) -> RatesSample:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return RatesSample(base=self.base, rates=dict(self.rates), source=self.source_name)


def mock_response(payload: Any, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "payload"
    response.raise_for_status.return_value = None
    return response


def mock_session(payload: Any, status_code: int = 200) -> Mock:
    session = Mock()
    session.request.return_value = mock_response(payload, status_code=status_code)
    return session
