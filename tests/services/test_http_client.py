from __future__ import annotations

from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from services.errors import InvalidResponse, NetworkError
from services.http_client import UpstreamClient, dig, require_decimal
from tests.helpers.stub_sources import mock_response, mock_session


def test_get_json_passes_timeout_params_and_headers() -> None:
    session = mock_session({"ok": True})
    client = UpstreamClient(source_name="test", timeout=3.5, session=session)

    payload = client.get_json("https://example.com/x", params={"a": "b"}, headers={"K": "V"})

    assert payload == {"ok": True}
    session.request.assert_called_once_with(
        "GET", "https://example.com/x", params={"a": "b"}, headers={"K": "V"}, timeout=3.5
    )


def test_http_errors_become_network_errors() -> None:
    session = Mock()
    response = mock_response({"message": "slow down"}, status_code=429)
    response.raise_for_status.side_effect = requests.HTTPError(response=response)
    session.request.return_value = response
    client = UpstreamClient(source_name="binance", session=session)

    with pytest.raises(NetworkError) as exc_info:
        client.get_json("https://example.com")

    assert exc_info.value.status_code == 429
    assert exc_info.value.source == "binance"
    assert exc_info.value.payload == {"message": "slow down"}


def test_transport_errors_become_network_errors() -> None:
    session = Mock()
    session.request.side_effect = requests.ConnectTimeout("timed out")
    client = UpstreamClient(source_name="kucoin", session=session)

    with pytest.raises(NetworkError):
        client.get_json("https://example.com")


def test_invalid_json_is_invalid_response() -> None:
    session = Mock()
    response = mock_response(None)
    response.json.side_effect = ValueError("no json")
    session.request.return_value = response
    client = UpstreamClient(source_name="coingecko", session=session)

    with pytest.raises(InvalidResponse):
        client.get_json("https://example.com")


def test_non_object_payload_is_invalid_response() -> None:
    client = UpstreamClient(source_name="coingecko", session=mock_session([1, 2, 3]))

    with pytest.raises(InvalidResponse):
        client.get_json("https://example.com")


def test_retry_adapter_mounted_only_when_requested() -> None:
    session = Mock()
    UpstreamClient(source_name="a", session=session)
    session.mount.assert_not_called()

    UpstreamClient(source_name="a", session=session, retry_attempts=2)
    assert session.mount.call_count == 2


def test_dig_walks_dicts_and_lists() -> None:
    payload = {"data": {"SOL": [{"quote": {"USD": {"price": 1}}}]}}

    assert dig(payload, "data", "SOL", 0, "quote", "USD", "price") == 1
    assert dig(payload, "data", "ETH") is None
    assert dig(payload, "data", "SOL", 3) is None
    assert dig("not a dict", "x") is None


@pytest.mark.parametrize("value", [None, "abc", "-1", 0, "NaN", True])
def test_require_decimal_rejects_bad_values(value: object) -> None:
    with pytest.raises(InvalidResponse):
        require_decimal(value, source="s", field="price")


def test_require_decimal_parses_strings_and_floats() -> None:
    assert require_decimal("151.2300", source="s", field="price") == Decimal("151.23")
    assert require_decimal(0.25, source="s", field="price") == Decimal("0.25")
