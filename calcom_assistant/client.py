"""Thin Cal.com API v2 client.

One authenticated HTTPS request per call, no retries. Non-success responses
become ``ApiError``; transport failures become ``UnexpectedError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .constants import API_VERSION_HEADER, API_VERSIONS, CALCOM_API_BASE_URL
from .errors import ApiError, UnexpectedError

LOG = logging.getLogger(__name__)

_METHODS = ("GET", "POST", "PATCH", "DELETE")


_INVALID = object()


def _safe_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return _INVALID


def extract_error_message(body: Any) -> Optional[str]:
    """Pick a readable message out of an error body.

    Checks ``message``, then ``error`` as a string, then ``error.message``;
    blank strings are skipped.
    """
    if not isinstance(body, dict):
        return None
    direct = body.get("message")
    if isinstance(direct, str) and direct.strip():
        return direct
    error = body.get("error")
    if isinstance(error, str) and error.strip():
        return error
    if isinstance(error, dict):
        nested = error.get("message")
        if isinstance(nested, str) and nested.strip():
            return nested
    return None


class CalClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = CALCOM_API_BASE_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _make_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, endpoint: str) -> Dict[str, str]:
        try:
            version = API_VERSIONS[endpoint]
        except KeyError:
            raise ValueError(f"Unknown endpoint category {endpoint!r}") from None
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            API_VERSION_HEADER: version,
        }

    def request(
        self,
        path: str,
        *,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        query: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Args:
            path: Path relative to the API base (e.g. ``/v2/schedules``).
            endpoint: Resource category selecting the ``cal-api-version`` header.
            method: HTTP method.
            body: JSON-serializable request body, if any.
            query: Query parameters; ``None`` and ``""`` values are dropped.

        Returns:
            The decoded body, or ``{}`` when the response body is empty.
        """
        method = method.upper()
        if method not in _METHODS:  # pragma: no cover - programming error
            raise ValueError(f"Unsupported method {method}")
        url = self._make_url(path)
        headers = self._headers(endpoint)
        params = {k: str(v) for k, v in (query or {}).items() if v is not None and v != ""}

        LOG.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(
                method,
                url,
                headers=headers,
                params=params or None,
                json=body if body is not None else None,
            )
        except requests.RequestException as exc:
            raise UnexpectedError(f"Cal.com request failed: {exc}") from exc

        text = resp.text or ""
        parsed = _safe_json(text) if text else _INVALID
        LOG.debug("%s %s -> %s", method, url, resp.status_code)

        if not 200 <= resp.status_code < 300:
            reason = resp.reason or ""
            message = extract_error_message(parsed) or (
                f"Cal.com API request failed ({resp.status_code} {reason})".replace(" )", ")")
            )
            raise ApiError(
                message,
                status=resp.status_code,
                status_text=reason,
                body=text if parsed is _INVALID else parsed,
            )

        if not text or parsed is None:
            return {}
        if parsed is _INVALID:
            return {"raw": text}
        return parsed
