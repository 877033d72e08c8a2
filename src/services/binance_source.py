from __future__ import annotations

from .http_client import UpstreamClient, require_decimal
from .price_sources import PriceSource
from .price_types import PriceSample


class BinanceSource(PriceSource):
    """Last trade price from the Binance spot ticker, USDT taken as USD."""

    def __init__(
        self,
        *,
        asset_symbol: str = "SOL",
        quote_symbol: str = "USDT",
        client: UpstreamClient | None = None,
        base_url: str = "https://api.binance.com",
        source_name: str = "binance",
    ) -> None:
        if not asset_symbol:
            msg = "asset_symbol must be provided"
            raise ValueError(msg)
        self.symbol = f"{asset_symbol.upper()}{quote_symbol.upper()}"
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name
        self.client = client or UpstreamClient(source_name=source_name)

    def fetch_price(self) -> PriceSample:
        payload = self.client.get_json(f"{self.base_url}/api/v3/ticker/price", params={"symbol": self.symbol})
        price = require_decimal(payload.get("price"), source=self.source_name, field="price", payload=payload)
        return PriceSample(price=price, source=self.source_name)


__all__ = ["BinanceSource"]
