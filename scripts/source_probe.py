# flake8: noqa E402
# Run via uv so project deps are loaded, e.g.:
# uv run scripts/source_probe.py --price-source coingecko --price-source kucoin --rate-source frankfurter
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from services.errors import FetchError
from services.price_service import build_price_sources, build_rate_sources


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Call each configured upstream once and report what it returned.")
    parser.add_argument(
        "--price-source",
        action="append",
        dest="price_sources",
        help="Price source name; can be repeated (default: PRICE_SOURCES from settings).",
    )
    parser.add_argument(
        "--rate-source",
        action="append",
        dest="rate_sources",
        help="Exchange-rate source name; can be repeated (default: RATE_SOURCES from settings).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    overrides: dict[str, Any] = {}
    if args.price_sources:
        overrides["price_sources"] = args.price_sources
    if args.rate_sources:
        overrides["rate_sources"] = args.rate_sources
    settings = config().model_copy(update=overrides)

    report: list[dict[str, Any]] = []
    for price_source in build_price_sources(settings):
        try:
            sample = price_source.fetch_price()
            report.append({"source": sample.source, "price": str(sample.price)})
        except FetchError as exc:
            report.append({"source": price_source.source_name, "error": str(exc), "status_code": exc.status_code})

    for rates_source in build_rate_sources(settings):
        try:
            rates = rates_source.fetch_rates()
            report.append(
                {"source": rates.source, "base": rates.base, "rates": {k: str(v) for k, v in rates.rates.items()}}
            )
        except FetchError as exc:
            report.append({"source": rates_source.source_name, "error": str(exc), "status_code": exc.status_code})

    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
