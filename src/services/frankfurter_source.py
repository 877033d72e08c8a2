from __future__ import annotations

from typing import Iterable

from .errors import InvalidResponse
from .http_client import UpstreamClient, require_decimal
from .price_sources import RatesSource
from .price_types import RatesSample


# API docs: https://frankfurter.dev/
class FrankfurterSource(RatesSource):
    """One request returning several cross rates relative to ``base_currency``."""

    def __init__(
        self,
        *,
        base_currency: str = "GBP",
        quote_currencies: Iterable[str] = ("USD", "EUR", "CAD", "JPY", "CNY"),
        client: UpstreamClient | None = None,
        base_url: str = "https://api.frankfurter.app",
        source_name: str = "frankfurter",
    ) -> None:
        self.base_currency = base_currency.upper()
        codes = [code.upper() for code in quote_currencies if code.upper() != self.base_currency]
        if "USD" not in codes and self.base_currency != "USD":
            codes.insert(0, "USD")
        if not codes:
            msg = "quote_currencies must contain at least one currency other than the base"
            raise ValueError(msg)
        self.quote_currencies = tuple(dict.fromkeys(codes))
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name
        self.client = client or UpstreamClient(source_name=source_name)

    def fetch_rates(self) -> RatesSample:
        payload = self.client.get_json(
            f"{self.base_url}/latest",
            params={"from": self.base_currency, "to": ",".join(self.quote_currencies)},
        )
        base = payload.get("base")
        rates_raw = payload.get("rates")
        if base is None or not isinstance(rates_raw, dict):
            raise InvalidResponse(
                f"{self.source_name} payload missing required fields", source=self.source_name, payload=payload
            )

        rates = {
            str(code).upper(): require_decimal(value, source=self.source_name, field=f"rates.{code}", payload=payload)
            for code, value in rates_raw.items()
        }
        return RatesSample(base=str(base).upper(), rates=rates, source=self.source_name)


__all__ = ["FrankfurterSource"]
