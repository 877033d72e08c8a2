from __future__ import annotations

from .errors import InvalidResponse
from .http_client import UpstreamClient, dig, require_decimal
from .price_sources import PriceSource
from .price_types import PriceSample

_SUCCESS_CODE = "200000"


class KuCoinSource(PriceSource):
    """Best-of-book last price from the KuCoin level1 orderbook endpoint."""

    def __init__(
        self,
        *,
        asset_symbol: str = "SOL",
        quote_symbol: str = "USDT",
        client: UpstreamClient | None = None,
        base_url: str = "https://api.kucoin.com",
        source_name: str = "kucoin",
    ) -> None:
        if not asset_symbol:
            msg = "asset_symbol must be provided"
            raise ValueError(msg)
        self.symbol = f"{asset_symbol.upper()}-{quote_symbol.upper()}"
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name
        self.client = client or UpstreamClient(source_name=source_name)

    def fetch_price(self) -> PriceSample:
        payload = self.client.get_json(
            f"{self.base_url}/api/v1/market/orderbook/level1",
            params={"symbol": self.symbol},
        )
        code = payload.get("code")
        if code is not None and str(code) != _SUCCESS_CODE:
            raise InvalidResponse(
                payload.get("msg") or f"{self.source_name} returned error code {code}",
                source=self.source_name,
                payload=payload,
            )
        price = require_decimal(
            dig(payload, "data", "price"),
            source=self.source_name,
            field="data.price",
            payload=payload,
        )
        return PriceSample(price=price, source=self.source_name)


__all__ = ["KuCoinSource"]
