"""Request payload builders for schedule and booking mutations.

The schedules API replaces ``availability`` and ``overrides`` wholesale on
PATCH, so each merge returns both sequences: the targeted one rebuilt, the
other echoed through untouched. Existing entries that are not objects, or lack
the key being matched, never match and are kept as-is.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

from .errors import ValidationError
from .models import AvailabilityWindow, Booking, OverrideWindow, Schedule, as_list, as_mapping
from .validators import DateRange, compare_instants, require_ordered

ScheduleLike = Union[Schedule, Dict[str, Any]]


def _sequences(schedule: ScheduleLike) -> tuple[List[Any], List[Any]]:
    if isinstance(schedule, Schedule):
        return list(schedule.availability), list(schedule.overrides)
    row = as_mapping(schedule)
    return list(as_list(row.get("availability"))), list(as_list(row.get("overrides")))


def _without(entries: Iterable[Any], key: str, value: str) -> List[Any]:
    return [item for item in entries if as_mapping(item).get(key) != value]


def merge_override_set(schedule: ScheduleLike, change: OverrideWindow) -> Dict[str, Any]:
    """Replace any override on ``change.date`` and append the new one last."""
    availability, overrides = _sequences(schedule)
    return {
        "availability": availability,
        "overrides": _without(overrides, "date", change.date) + [change.to_api()],
    }


def merge_override_clear(schedule: ScheduleLike, date: str) -> Dict[str, Any]:
    """Drop overrides on ``date``; no match leaves the sequence as it was."""
    availability, overrides = _sequences(schedule)
    return {
        "availability": availability,
        "overrides": _without(overrides, "date", date),
    }


def merge_window_set(schedule: ScheduleLike, change: AvailabilityWindow) -> Dict[str, Any]:
    """Replace the window(s) for ``change.day`` and append the new one last."""
    availability, overrides = _sequences(schedule)
    return {
        "availability": _without(availability, "day", change.day) + [change.to_api()],
        "overrides": overrides,
    }


def build_booking_cancel_payload(reason: Optional[str] = None) -> Dict[str, Any]:
    return {"reason": reason} if reason else {}


def build_booking_reschedule_payload(start: str, end: str, timezone: str) -> Dict[str, Any]:
    require_ordered(start, end, "Reschedule end time must be after start time")
    return {"start": start, "end": end, "timeZone": timezone}


def filter_overrides_in_range(overrides: Iterable[Any], date_range: DateRange) -> List[Dict[str, Any]]:
    """Overrides whose date falls inside ``date_range`` (inclusive)."""
    out: List[Dict[str, Any]] = []
    for item in overrides:
        if not isinstance(item, dict):
            continue
        date = str(item.get("date") or "")
        if date and date_range.contains(date):
            out.append(item)
    return out


def filter_bookings(
    bookings: Iterable[Booking],
    *,
    timezone: str,
    today: bool = False,
    upcoming: bool = False,
    now: Optional[_dt.datetime] = None,
) -> List[Booking]:
    """Apply the ``--today`` / ``--upcoming`` filters.

    Bookings without a start are always dropped. ``today`` matches the start's
    date prefix against the current date in ``timezone``; ``upcoming`` keeps
    bookings starting at or after ``now``.
    """
    if today and upcoming:
        raise ValidationError("Use only one of --today or --upcoming")
    now = now or _dt.datetime.now(_dt.timezone.utc)
    local_today = now.astimezone(ZoneInfo(timezone)).date().isoformat()
    now_iso = now.astimezone(_dt.timezone.utc).isoformat().replace("+00:00", "Z")

    out: List[Booking] = []
    for booking in bookings:
        if not booking.start:
            continue
        if today and not booking.start.startswith(local_today):
            continue
        if upcoming and compare_instants(booking.start, now_iso) < 0:
            continue
        out.append(booking)
    return out
