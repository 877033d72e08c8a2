from __future__ import annotations

from .http_client import UpstreamClient, dig, require_decimal
from .price_sources import PriceSource
from .price_types import PriceSample


# API docs: https://docs.coingecko.com/reference/simple-price
class CoinGeckoSource(PriceSource):
    def __init__(
        self,
        *,
        coin_id: str = "solana",
        client: UpstreamClient | None = None,
        base_url: str = "https://api.coingecko.com/api/v3",
        source_name: str = "coingecko",
    ) -> None:
        if not coin_id:
            msg = "coin_id must be provided"
            raise ValueError(msg)
        self.coin_id = coin_id.lower()
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name
        self.client = client or UpstreamClient(source_name=source_name)

    def fetch_price(self) -> PriceSample:
        payload = self.client.get_json(
            f"{self.base_url}/simple/price",
            params={"ids": self.coin_id, "vs_currencies": "usd"},
        )
        price = require_decimal(
            dig(payload, self.coin_id, "usd"),
            source=self.source_name,
            field=f"{self.coin_id}.usd",
            payload=payload,
        )
        return PriceSample(price=price, source=self.source_name)


__all__ = ["CoinGeckoSource"]
