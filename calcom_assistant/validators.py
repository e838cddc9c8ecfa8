"""Input validators for dates, times, weekdays, timezones and API keys.

Each validator takes the raw string from the command line and returns the
normalized value, or raises ``ValidationError`` naming the expected format.
They run before any network call or prompt.
"""
from __future__ import annotations

import datetime as _dt
import re
from dataclasses import dataclass
from typing import Any, Optional

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import MIN_API_KEY_LENGTH, WEEKDAYS
from .errors import ValidationError

__all__ = [
    "DateRange",
    "compare_instants",
    "parse_api_key",
    "parse_date",
    "parse_date_range",
    "parse_iso_datetime",
    "parse_limit",
    "parse_time",
    "parse_timezone",
    "parse_weekday",
    "require_ordered",
]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})$"
)


@dataclass(frozen=True)
class DateRange:
    """Inclusive YYYY-MM-DD bounds; either side may be open."""

    start: Optional[str] = None
    end: Optional[str] = None

    def contains(self, date: str) -> bool:
        if self.start and date < self.start:
            return False
        if self.end and date > self.end:
            return False
        return True


def _require_str(value: Any, message: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(message)
    return value


def parse_date(value: Any) -> str:
    """Accept ``YYYY-MM-DD`` by shape only; the calendar date is not checked."""
    msg = "Expected date format YYYY-MM-DD"
    raw = _require_str(value, msg)
    if not _DATE_RE.match(raw):
        raise ValidationError(msg, {"value": raw})
    return raw


def parse_time(value: Any) -> str:
    msg = "Expected time format HH:mm (24h)"
    raw = _require_str(value, msg)
    if not _TIME_RE.match(raw):
        raise ValidationError(msg, {"value": raw})
    return raw


def parse_weekday(value: Any) -> str:
    msg = f"Expected weekday, one of: {', '.join(WEEKDAYS)}"
    day = _require_str(value, msg).lower()
    if day not in WEEKDAYS:
        raise ValidationError(msg, {"value": value})
    return day


_FRACTION_RE = re.compile(r"\.(\d+)")


def _to_datetime(value: str) -> _dt.datetime:
    # before 3.11 fromisoformat reads neither a trailing Z nor fractions other
    # than 3 or 6 digits
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return _dt.datetime.fromisoformat(text)


def parse_iso_datetime(value: Any) -> str:
    """Accept an ISO-8601 date-time carrying ``Z`` or an explicit UTC offset."""
    msg = "Expected ISO-8601 datetime with offset (e.g. 2026-03-02T09:00:00+01:00)"
    raw = _require_str(value, msg)
    if not _ISO_DATETIME_RE.match(raw):
        raise ValidationError(msg, {"value": raw})
    try:
        parsed = _to_datetime(raw)
    except ValueError:
        raise ValidationError(msg, {"value": raw}) from None
    if parsed.tzinfo is None:
        raise ValidationError(msg, {"value": raw})
    return raw


def parse_timezone(value: Any) -> str:
    msg = "Invalid timezone identifier"
    raw = _require_str(value, msg)
    if not raw.strip():
        raise ValidationError(msg, {"value": raw})
    try:
        ZoneInfo(raw)
    # directories and over-long names surface as OSError, not ZoneInfoNotFoundError
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise ValidationError(msg, {"value": raw}) from None
    return raw


def parse_api_key(value: Any) -> str:
    key = _require_str(value, "API key looks too short").strip()
    if len(key) < MIN_API_KEY_LENGTH:
        raise ValidationError("API key looks too short")
    return key


def parse_limit(value: Any) -> int:
    """Positive integer for ``--limit``."""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Expected a positive integer limit", {"value": value}) from None
    if limit <= 0:
        raise ValidationError("Expected a positive integer limit", {"value": value})
    return limit


def parse_date_range(start: Optional[str] = None, end: Optional[str] = None) -> DateRange:
    return DateRange(
        start=parse_date(start) if start else None,
        end=parse_date(end) if end else None,
    )


def compare_instants(start: str, end: str) -> int:
    """Return -1/0/1 ordering two timestamps.

    Offset-aware ISO values compare as instants; anything else falls back to
    plain string order.
    """
    try:
        left: Any = _to_datetime(start)
        right: Any = _to_datetime(end)
        if left.tzinfo is None or right.tzinfo is None:
            raise ValueError(start)
    except ValueError:
        left, right = start, end
    return (left > right) - (left < right)


def require_ordered(start: str, end: str, message: str) -> None:
    """Raise ``ValidationError`` unless ``start`` sorts strictly before ``end``."""
    if compare_instants(start, end) >= 0:
        raise ValidationError(message, {"start": start, "end": end})
