from __future__ import annotations

from main import describe_refresh
from services.errors import NetworkError
from services.fetch_orchestrator import ChainOutcome, RefreshResult


def test_describe_refresh_reports_winner_and_errors() -> None:
    result = RefreshResult(
        price=ChainOutcome(source="binance", errors=(("coingecko", NetworkError("coingecko request failed")),)),
    )

    assert describe_refresh(result) == {
        "skipped": False,
        "price": {"source": "binance", "errors": [{"source": "coingecko", "error": "coingecko request failed"}]},
        "rates": None,
    }


def test_describe_refresh_for_skipped_cycle() -> None:
    assert describe_refresh(RefreshResult(skipped=True)) == {"skipped": True, "price": None, "rates": None}
