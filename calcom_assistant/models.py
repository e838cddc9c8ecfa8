"""Data models for Cal.com remote records and local config.

Remote payloads vary between API versions, so every DTO is built through the
shape helpers below and keeps the untouched record in ``raw``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


# -------------------- Shape helpers --------------------

def as_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` when it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    """Return ``value`` when it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def dig(value: Any, path: Sequence[str]) -> Any:
    """Walk nested dict keys; ``None`` when any segment is missing."""
    current = value
    for segment in path:
        if not isinstance(current, dict) or segment not in current:
            return None
        current = current[segment]
    return current


def coerce_list(response: Any, *paths: Sequence[str]) -> List[Any]:
    """Return the first list found at one of ``paths``, or ``response`` itself
    when it is already a list."""
    for path in paths:
        found = dig(response, path)
        if isinstance(found, list):
            return found
    if isinstance(response, list):
        return response
    return []


def coerce_record(response: Any, *paths: Sequence[str]) -> Dict[str, Any]:
    """Return the first dict found at one of ``paths``, else ``response``."""
    for path in paths:
        found = dig(response, path)
        if isinstance(found, dict):
            return found
    return as_mapping(response)


def text(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


# -------------------- Remote records --------------------

@dataclass
class Schedule:
    """Availability schedule as last fetched from the API."""

    id: str
    name: Optional[str] = None
    timezone: Optional[str] = None
    availability: List[Any] = field(default_factory=list)
    overrides: List[Any] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, record: Any) -> "Schedule":
        row = as_mapping(record)
        return cls(
            id=text(row.get("id")),
            name=row.get("name"),
            timezone=row.get("timeZone") or row.get("timezone"),
            availability=as_list(row.get("availability")),
            overrides=as_list(row.get("overrides")),
            raw=row,
        )


@dataclass
class Booking:
    id: str
    start: str = ""
    end: str = ""
    status: str = ""
    title: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, record: Any) -> "Booking":
        row = as_mapping(record)
        return cls(
            id=text(row.get("id") if row.get("id") is not None else row.get("uid")),
            start=text(row.get("startTime") or row.get("start")),
            end=text(row.get("endTime") or row.get("end")),
            status=text(row.get("status")),
            title=text(row.get("title")),
            raw=row,
        )


@dataclass
class EventType:
    id: str
    slug: str = ""
    title: str = ""
    booking_url: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, record: Any) -> "EventType":
        row = as_mapping(record)
        return cls(
            id=text(row.get("id")),
            slug=text(row.get("slug")),
            title=text(row.get("title")),
            booking_url=text(row.get("bookingUrl")),
            raw=row,
        )


# -------------------- Requested changes --------------------

@dataclass(frozen=True)
class AvailabilityWindow:
    """Recurring weekly window for one weekday."""

    day: str
    start: str
    end: str
    timezone: str

    def to_api(self) -> Dict[str, str]:
        return {
            "day": self.day,
            "startTime": self.start,
            "endTime": self.end,
            "timeZone": self.timezone,
        }


@dataclass(frozen=True)
class OverrideWindow:
    """One-off replacement of availability for a single date."""

    date: str
    start: str
    end: str
    timezone: str

    def to_api(self) -> Dict[str, str]:
        return {
            "date": self.date,
            "startTime": self.start,
            "endTime": self.end,
            "timeZone": self.timezone,
        }


# -------------------- Local config --------------------

@dataclass
class StoredConfig:
    """Contents of the local credential file."""

    api_key: Optional[str] = None
    timezone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "StoredConfig":
        row = as_mapping(data)
        api_key = row.get("apiKey")
        timezone = row.get("timezone")
        return cls(
            api_key=api_key if isinstance(api_key, str) else None,
            timezone=timezone if isinstance(timezone, str) else None,
        )

    def to_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if self.api_key is not None:
            out["apiKey"] = self.api_key
        if self.timezone is not None:
            out["timezone"] = self.timezone
        return out
