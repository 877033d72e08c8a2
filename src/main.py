from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Sequence

import uvicorn

from api.api import create_app
from api.responses import PRICE_UNAVAILABLE, render_price
from config import AppSettings, config
from services.errors import StalePriceError
from services.fetch_orchestrator import ChainOutcome, RefreshResult
from services.price_service import build_default_service

logger = logging.getLogger(__name__)


def serve(settings: AppSettings, *, host: str | None = None, port: int | None = None) -> None:
    app = create_app(settings)
    resolved_host = host or settings.host
    resolved_port = port or settings.port
    logger.info("Server running on %s:%d", resolved_host, resolved_port)
    uvicorn.run(app, host=resolved_host, port=resolved_port, log_level=settings.log_level.lower())


def refresh_once(settings: AppSettings) -> dict[str, Any]:
    service = build_default_service(settings, with_scheduler=False)
    result = service.orchestrator.refresh()
    try:
        body = render_price(service.cache.get(), exchange_rates_layout=service.exchange_rates_layout)
    except StalePriceError:
        body = dict(PRICE_UNAVAILABLE)
    return {"response": body, "refresh": describe_refresh(result)}


def describe_refresh(result: RefreshResult) -> dict[str, Any]:
    def chain(outcome: ChainOutcome | None) -> dict[str, Any] | None:
        if outcome is None:
            return None
        return {
            "source": outcome.source,
            "errors": [{"source": name, "error": str(exc)} for name, exc in outcome.errors],
        }

    return {"skipped": result.skipped, "price": chain(result.price), "rates": chain(result.rates)}


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="SOL price proxy.")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server (default).")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    subparsers.add_parser("refresh", help="Run one refresh cycle and print the resulting payload.")

    args = parser.parse_args(argv)
    settings = config()

    if args.command == "refresh":
        print(json.dumps(refresh_once(settings), indent=2))
        return

    serve(settings, host=getattr(args, "host", None), port=getattr(args, "port", None))


if __name__ == "__main__":
    logging.basicConfig(level=config().log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    main()
