import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Annotated, AsyncGenerator, Awaitable, Callable

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from api.dependencies import get_price_cache, get_price_service, get_rate_limiter
from api.responses import PRICE_UNAVAILABLE, RATE_LIMITED, render_price
from config import AppSettings, config
from services.errors import StalePriceError
from services.price_cache import PriceCache
from services.price_service import PriceService, build_default_service
from services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    scheduler = fastapi_app.state.price_service.scheduler
    if scheduler is not None:
        scheduler.start()
    yield
    if scheduler is not None:
        scheduler.shutdown()


def create_app(settings: AppSettings | None = None, *, service: PriceService | None = None) -> FastAPI:
    settings = settings or config()
    app = FastAPI(lifespan=lifespan)
    app.state.price_service = service or build_default_service(settings)
    app.state.liveness_message = settings.liveness_message
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.cors_origin_regex,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_process_time)
    app.add_api_route("/", health, methods=["GET"], response_class=PlainTextResponse)
    app.add_api_route("/sol-price", get_sol_price, methods=["GET"])
    return app


async def log_process_time(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    start_time = perf_counter()
    response = await call_next(request)
    process_time = perf_counter() - start_time
    logger.info("Request time: %s %s -> %d: %.4fs", request.method, request.url, response.status_code, process_time)
    return response


def health(request: Request) -> str:
    return str(request.app.state.liveness_message)


def get_sol_price(
    cache: Annotated[PriceCache, Depends(get_price_cache)],
    limiter: Annotated[FixedWindowRateLimiter | None, Depends(get_rate_limiter)],
    service: Annotated[PriceService, Depends(get_price_service)],
) -> JSONResponse:
    if limiter is not None and not limiter.allow():
        return JSONResponse(status_code=429, content=RATE_LIMITED)
    try:
        cached = cache.get()
    except StalePriceError:
        return JSONResponse(status_code=503, content=PRICE_UNAVAILABLE)
    return JSONResponse(content=render_price(cached, exchange_rates_layout=service.exchange_rates_layout))
