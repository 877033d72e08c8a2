from __future__ import annotations

from typing import Iterable

from .errors import InvalidResponse
from .http_client import UpstreamClient, dig, require_decimal
from .price_sources import RatesSource
from .price_types import RatesSample


# API docs: https://www.exchangerate-api.com/docs/free
class ExchangeRateApiSource(RatesSource):
    """Single-pair lookup (by default GBP to USD) from the open exchange-rate API."""

    def __init__(
        self,
        *,
        base_currency: str = "GBP",
        quote_currencies: Iterable[str] = ("USD",),
        client: UpstreamClient | None = None,
        base_url: str = "https://open.er-api.com/v6",
        source_name: str = "exchangerate-api",
    ) -> None:
        self.base_currency = base_currency.upper()
        codes = [code.upper() for code in quote_currencies]
        if "USD" not in codes:
            codes.insert(0, "USD")
        self.quote_currencies = tuple(dict.fromkeys(codes))
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name
        self.client = client or UpstreamClient(source_name=source_name)

    def fetch_rates(self) -> RatesSample:
        payload = self.client.get_json(f"{self.base_url}/latest/{self.base_currency}")
        result = payload.get("result")
        if result is not None and result != "success":
            message = payload.get("error-type") or f"{self.source_name} returned result={result}"
            raise InvalidResponse(str(message), source=self.source_name, payload=payload)

        base = str(payload.get("base_code") or self.base_currency).upper()
        rates = {
            code: require_decimal(
                dig(payload, "rates", code), source=self.source_name, field=f"rates.{code}", payload=payload
            )
            for code in self.quote_currencies
            if code != base
        }
        return RatesSample(base=base, rates=rates, source=self.source_name)


__all__ = ["ExchangeRateApiSource"]
