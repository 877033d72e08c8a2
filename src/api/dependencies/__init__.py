from fastapi import Request

from services.price_cache import PriceCache
from services.price_service import PriceService
from services.rate_limiter import FixedWindowRateLimiter


def get_price_service(request: Request) -> PriceService:
    service: PriceService = request.app.state.price_service
    return service


def get_price_cache(request: Request) -> PriceCache:
    return get_price_service(request).cache


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter | None:
    return get_price_service(request).rate_limiter
