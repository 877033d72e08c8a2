from __future__ import annotations

from typing import Any


class FetchError(Exception):
    """A source could not produce a usable sample."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        status_code: int | None = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code
        self.payload = payload


class NetworkError(FetchError):
    """Transport failure, timeout or non-2xx status reaching an upstream."""


class InvalidResponse(FetchError):
    """Upstream answered, but the payload is malformed or missing fields."""


class InvalidSample(FetchError):
    """A sample was rejected by cache-side validation."""


class StalePriceError(LookupError):
    """The cache holds no price, or the cached price is older than the freshness window."""


__all__ = ["FetchError", "InvalidResponse", "InvalidSample", "NetworkError", "StalePriceError"]
