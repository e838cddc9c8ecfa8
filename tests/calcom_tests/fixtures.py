"""Shared test fixtures for calcom tests."""

from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple
from unittest import mock


class FakeResponse:
    """Fake HTTP response for mocking requests."""

    def __init__(self, body: Any = None, status: int = 200, reason: str = "OK", text: Optional[str] = None):
        self.status_code = status
        self.reason = reason
        if text is not None:
            self.text = text
        else:
            self.text = "" if body is None else json.dumps(body)


class FakeSession:
    """Fake HTTP session that returns queued responses."""

    def __init__(self, responses: List[FakeResponse]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, headers=None, params=None, json=None) -> FakeResponse:
        self.calls.append({"method": method, "url": url, "headers": headers, "params": params, "json": json})
        if not self.responses:
            raise AssertionError("No response queued")
        return self.responses.pop(0)


class FakeCalClient:
    """Routes ``request`` calls to canned bodies keyed by (method, path)."""

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Any]] = None):
        self.routes = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []

    def request(self, path, *, endpoint, method="GET", body=None, query=None):
        self.calls.append({"method": method, "path": path, "endpoint": endpoint, "body": body, "query": query})
        key = (method, path)
        if key not in self.routes:
            raise AssertionError(f"Unexpected request {method} {path}")
        return self.routes[key]

    def mutations(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] != "GET"]


def make_schedule(
    schedule_id: int = 1,
    availability: Optional[List[Any]] = None,
    overrides: Optional[List[Any]] = None,
) -> dict:
    return {
        "id": schedule_id,
        "name": "Working hours",
        "timeZone": "Europe/Oslo",
        "availability": availability if availability is not None else [],
        "overrides": overrides if overrides is not None else [],
    }


def schedule_routes(schedule: dict) -> Dict[Tuple[str, str], Any]:
    """Routes for list + get + patch of a single schedule."""
    sid = schedule["id"]
    return {
        ("GET", "/v2/schedules"): {"status": "success", "data": [schedule]},
        ("GET", f"/v2/schedules/{sid}"): {"status": "success", "data": schedule},
        ("PATCH", f"/v2/schedules/{sid}"): {"status": "success", "data": schedule},
    }


@contextmanager
def calcom_env(api_key: Optional[str] = "cal_live_abcdef123456", config: Optional[dict] = None) -> Iterator[Path]:
    """Isolate env and config file; yields the config path."""
    with tempfile.TemporaryDirectory() as td:
        path = Path(td) / "calcom-cli" / "config.json"
        if config is not None:
            path.parent.mkdir(parents=True)
            path.write_text(json.dumps(config))
        env = {"CALCOM_CONFIG": str(path), "XDG_CONFIG_HOME": td}
        if api_key:
            env["CALCOM_API_KEY"] = api_key
        with mock.patch.dict(os.environ, env, clear=True):
            yield path
