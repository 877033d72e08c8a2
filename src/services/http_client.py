from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from .errors import InvalidResponse, NetworkError

logger = logging.getLogger(__name__)


class UpstreamClient:
    """JSON-over-HTTP GET helper shared by the source adapters.

    Transport problems surface as ``NetworkError``; anything that is not a JSON
    object surfaces as ``InvalidResponse``. Both carry the source name so the
    orchestrator can report which link of the chain failed.
    """

    def __init__(
        self,
        *,
        source_name: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        retry_attempts: int = 0,
        retry_backoff_seconds: float = 1,
    ) -> None:
        if timeout <= 0:
            msg = "timeout must be > 0"
            raise ValueError(msg)

        self.source_name = source_name
        self.timeout = timeout
        self._session = session or requests.Session()

        if retry_attempts > 0:
            retry = Retry(
                total=retry_attempts,
                backoff_factor=retry_backoff_seconds,
                status_forcelist={429},
                allowed_methods={"GET"},
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            self._session.mount("https://", adapter)
            self._session.mount("http://", adapter)

    def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        logger.debug("GET %s params=%s (%s)", url, params, self.source_name)
        try:
            response = self._session.request(
                "GET",
                url,
                params=dict(params) if params else None,
                headers=dict(headers) if headers else None,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            raise NetworkError(
                f"{self.source_name} request failed",
                source=self.source_name,
                status_code=getattr(resp, "status_code", None),
                payload=self._extract_payload(resp),
            ) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise NetworkError(
                f"{self.source_name} request failed: {exc}", source=self.source_name, status_code=status_code
            ) from exc

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise InvalidResponse(
                f"{self.source_name} returned invalid JSON", source=self.source_name, payload=response.text
            ) from exc

        if not isinstance(payload, dict):
            raise InvalidResponse(
                f"{self.source_name} returned unexpected payload type", source=self.source_name, payload=payload
            )
        return payload

    @staticmethod
    def _extract_payload(response: Response | None) -> Any | None:
        if response is None:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


def dig(payload: Any, *path: str | int) -> Any | None:
    """Walk nested dicts/lists, returning ``None`` as soon as a step is missing."""
    current = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def require_decimal(value: Any, *, source: str, field: str, payload: Any | None = None) -> Decimal:
    """Parse an upstream number, rejecting missing, non-numeric, non-finite and non-positive values."""
    if value is None or isinstance(value, bool):
        raise InvalidResponse(f"{source} payload missing {field}", source=source, payload=payload)
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        msg = f"{source} payload has non-numeric {field}: {value!r}"
        raise InvalidResponse(msg, source=source, payload=payload) from exc
    if not parsed.is_finite() or parsed <= 0:
        raise InvalidResponse(f"{source} payload has invalid {field}: {value!r}", source=source, payload=payload)
    return parsed


__all__ = ["UpstreamClient", "dig", "require_decimal"]
