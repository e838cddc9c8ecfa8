"""Schedule, event type, slot and booking operations on top of ``CalClient``."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .client import CalClient
from .errors import MissingBookingUrlError, NotFoundError
from .models import Booking, EventType, Schedule, as_list, as_mapping, coerce_list, coerce_record


# -------------------- Schedules --------------------

def list_schedules(client: CalClient) -> List[Schedule]:
    response = client.request("/v2/schedules", endpoint="schedules")
    return [Schedule.from_api(row) for row in coerce_list(response, ["data"], ["data", "schedules"], ["schedules"])]


def get_schedule(client: CalClient, schedule_id: str) -> Schedule:
    response = client.request(f"/v2/schedules/{schedule_id}", endpoint="schedules")
    return Schedule.from_api(coerce_record(response, ["data", "schedule"], ["data"], ["schedule"]))


def patch_schedule(client: CalClient, schedule_id: str, payload: Dict[str, Any]) -> Any:
    return client.request(
        f"/v2/schedules/{schedule_id}",
        endpoint="schedules",
        method="PATCH",
        body=payload,
    )


def resolve_schedule_id(client: CalClient, explicit: Optional[str] = None) -> str:
    """Explicit id wins; otherwise the account's first schedule."""
    if explicit:
        return str(explicit)
    schedules = list_schedules(client)
    if not schedules:
        raise NotFoundError("No schedules available for this account.")
    return schedules[0].id


# -------------------- Event types --------------------

def _flatten_event_type_groups(response: Any) -> List[Any]:
    rows: List[Any] = []
    for group in as_list(as_mapping(as_mapping(response).get("data")).get("eventTypeGroups")):
        rows.extend(as_list(as_mapping(group).get("eventTypes")))
    return rows


def list_event_types(client: CalClient) -> List[EventType]:
    response = client.request("/v2/event-types", endpoint="eventTypes")
    rows = coerce_list(response, ["data"], ["eventTypes"], ["data", "eventTypes"])
    if not rows:
        rows = _flatten_event_type_groups(response)
    return [EventType.from_api(row) for row in rows]


def find_event_type(event_types: Sequence[EventType], slug: str) -> EventType:
    """Return the event type for ``slug``; it must expose a booking URL."""
    for event_type in event_types:
        if event_type.slug == slug:
            if not event_type.booking_url:
                raise MissingBookingUrlError(f"Event type {slug} has no bookingUrl", {"slug": slug})
            return event_type
    raise NotFoundError(f"No event type found for slug: {slug}", {"slug": slug})


# -------------------- Slots --------------------

def check_slots(client: CalClient, event_type_id: str, start: str, end: str, timezone: str) -> Any:
    return client.request(
        "/v2/slots",
        endpoint="slots",
        query={
            "eventTypeId": event_type_id,
            "start": start,
            "end": end,
            "timeZone": timezone,
        },
    )


# -------------------- Bookings --------------------

def list_bookings(client: CalClient, limit: Optional[int] = None) -> List[Booking]:
    response = client.request(
        "/v2/bookings",
        endpoint="bookings",
        query={"limit": limit},
    )
    return [Booking.from_api(row) for row in coerce_list(response, ["data"], ["data", "bookings"], ["bookings"])]


def cancel_booking(client: CalClient, booking_id: str, payload: Dict[str, Any]) -> Any:
    return client.request(
        f"/v2/bookings/{booking_id}/cancel",
        endpoint="bookings",
        method="POST",
        body=payload,
    )


def reschedule_booking(client: CalClient, booking_id: str, payload: Dict[str, Any]) -> Any:
    return client.request(
        f"/v2/bookings/{booking_id}/reschedule",
        endpoint="bookings",
        method="POST",
        body=payload,
    )
