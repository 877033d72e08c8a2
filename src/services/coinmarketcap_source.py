from __future__ import annotations

from typing import Any

from .errors import InvalidResponse
from .http_client import UpstreamClient, dig, require_decimal
from .price_sources import PriceSource
from .price_types import PriceSample


# API docs: https://coinmarketcap.com/api/documentation/v1/#operation/getV1CryptocurrencyQuotesLatest
class CoinMarketCapSource(PriceSource):
    def __init__(
        self,
        *,
        api_key: str,
        asset_symbol: str = "SOL",
        client: UpstreamClient | None = None,
        base_url: str = "https://pro-api.coinmarketcap.com",
        source_name: str = "coinmarketcap",
    ) -> None:
        if not api_key:
            msg = "api_key must be provided"
            raise ValueError(msg)
        if not asset_symbol:
            msg = "asset_symbol must be provided"
            raise ValueError(msg)

        self.api_key = api_key
        self.asset_symbol = asset_symbol.upper()
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name
        self.client = client or UpstreamClient(source_name=source_name)

    def fetch_price(self) -> PriceSample:
        payload = self.client.get_json(
            f"{self.base_url}/v1/cryptocurrency/quotes/latest",
            params={"symbol": self.asset_symbol, "convert": "USD"},
            headers={"X-CMC_PRO_API_KEY": self.api_key, "Accept": "application/json"},
        )
        error_code = dig(payload, "status", "error_code")
        if error_code:
            message = dig(payload, "status", "error_message") or f"{self.source_name} error {error_code}"
            raise InvalidResponse(str(message), source=self.source_name, payload=payload)

        price = require_decimal(
            self._extract_usd_price(payload),
            source=self.source_name,
            field=f"data.{self.asset_symbol}.quote.USD.price",
            payload=payload,
        )
        return PriceSample(price=price, source=self.source_name)

    def _extract_usd_price(self, payload: dict[str, Any]) -> Any | None:
        entry = dig(payload, "data", self.asset_symbol)
        # v2-style responses return a list of matches per symbol
        if isinstance(entry, list):
            entry = entry[0] if entry else None
        return dig(entry, "quote", "USD", "price")


__all__ = ["CoinMarketCapSource"]
