"""Cal.com CLI commands.

Commands:
  auth set|status
  schedule list|show
  avail override set|clear|list, avail window set|list
  link list|share
  slot check
  booking list|cancel|reschedule

Mutating commands validate input and compute the full payload before asking
for confirmation; ``--dry-run`` prints that payload and stops.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from . import __version__
from .api import (
    cancel_booking,
    check_slots,
    find_event_type,
    get_schedule,
    list_bookings,
    list_event_types,
    list_schedules,
    patch_schedule,
    reschedule_booking,
    resolve_schedule_id,
)
from .auth import auth_status, resolve_timezone, resolve_token, set_auth
from .cli_framework import CLIApp
from .client import CalClient
from .confirm import GateOutcome, confirm
from .config import get_config_path, read_config
from .constants import CALCOM_API_BASE_URL, DEFAULT_TIMEZONE, WEEKDAYS
from .errors import CanceledError, ValidationError
from .models import AvailabilityWindow, OverrideWindow, StoredConfig, text
from .output import OutputWriter
from .payloads import (
    build_booking_cancel_payload,
    build_booking_reschedule_payload,
    filter_bookings,
    filter_overrides_in_range,
    merge_override_clear,
    merge_override_set,
    merge_window_set,
)
from .validators import (
    parse_date,
    parse_date_range,
    parse_iso_datetime,
    parse_limit,
    parse_time,
    parse_timezone,
    parse_weekday,
    require_ordered,
)

LOG = logging.getLogger(__name__)

HELP_SCHEDULE_ID = "Schedule ID (defaults to first schedule)"
HELP_DRY_RUN = "Print payload only"
HELP_YES = "Skip confirmation prompt"

app = CLIApp(
    "calcom",
    f"Cal.com CLI for personal scheduling workflows (default timezone: {DEFAULT_TIMEZONE})",
    version=__version__,
)


@dataclass
class Runtime:
    out: OutputWriter
    timezone: str
    config: StoredConfig
    client: CalClient


def _environ() -> Mapping[str, str]:
    return os.environ


def build_runtime(args: argparse.Namespace) -> Runtime:
    """Resolve config, timezone and token once for this invocation."""
    config = read_config()
    timezone = resolve_timezone(config, args.timezone)
    token = resolve_token(config, _environ())
    LOG.debug("Using API key from %s, timezone %s", token.source, timezone)
    return Runtime(
        out=args._output,
        timezone=timezone,
        config=config,
        client=CalClient(token.token, CALCOM_API_BASE_URL),
    )


def run_mutation(
    args: argparse.Namespace,
    out: OutputWriter,
    *,
    action: str,
    target: Dict[str, Any],
    payload: Dict[str, Any],
    question: str,
    mutate: Callable[[], Any],
) -> Optional[Any]:
    """Dry-run, or confirm then call ``mutate``.

    Returns the mutation result, or None after a dry run.
    """
    if args.dry_run:
        out.print_payload({"dryRun": True, "action": action, **target, "payload": payload})
        return None
    outcome = confirm(question, assume_yes=args.yes)
    if outcome is GateOutcome.CANCELED:
        raise CanceledError()
    LOG.debug("%s %s", action, outcome.value)
    return mutate()


def _mutation_args(cmd: Callable) -> Callable:
    cmd = app.argument("--yes", "-y", action="store_true", help=HELP_YES)(cmd)
    cmd = app.argument("--dry-run", action="store_true", help=HELP_DRY_RUN)(cmd)
    return cmd


def _ordered_times(start: str, end: str) -> None:
    require_ordered(start, end, "End time must be after start time")


# --- auth group ---
auth_group = app.group("auth", help="Authentication and local config")


@auth_group.command(
    "set",
    help="Set API key in local config (0600)",
    description="Set API key in local config (0600). --timezone is persisted as the preferred timezone.",
)
@auth_group.argument("--api-key", required=True, help="Cal.com API key")
def cmd_auth_set(args) -> int:
    timezone = parse_timezone(args.timezone) if args.timezone else None
    path = set_auth(args.api_key, timezone)
    payload = {"configured": True, "configPath": str(path)}
    if timezone:
        payload["timezone"] = timezone
    args._output.print_result(payload, "Auth updated in local config (secret hidden).")
    return 0


@auth_group.command("status", help="Show authentication source without revealing secret")
def cmd_auth_status(args) -> int:
    config = read_config()
    timezone = resolve_timezone(config, args.timezone)
    status = auth_status(config, timezone, _environ(), get_config_path())
    if status["authenticated"]:
        human = (
            f"Authenticated via {status['source']}.\n"
            f"Token: {status['tokenPreview']}\n"
            f"Config: {status['configPath']}\n"
            f"Timezone: {timezone}"
        )
    else:
        human = (
            "No API key configured. Run `calcom auth set --api-key <key>` or set CALCOM_API_KEY.\n"
            f"Timezone: {timezone}"
        )
    args._output.print_result(status, human)
    return 0


# --- schedule group ---
schedule_group = app.group("schedule", help="Schedule inspection commands")


@schedule_group.command("list", help="List schedules")
def cmd_schedule_list(args) -> int:
    rt = build_runtime(args)
    schedules = list_schedules(rt.client)
    if rt.out.config.machine:
        rt.out.print_result({"schedules": [s.raw for s in schedules]})
        return 0
    rt.out.print_rows(((s.id, s.name or "Unnamed schedule") for s in schedules), "No schedules found.")
    return 0


@schedule_group.command("show", help="Show one schedule")
@schedule_group.argument("--id", dest="schedule_id", help=HELP_SCHEDULE_ID)
def cmd_schedule_show(args) -> int:
    rt = build_runtime(args)
    schedule_id = resolve_schedule_id(rt.client, args.schedule_id)
    schedule = get_schedule(rt.client, schedule_id)
    human = "\n".join([
        f"Schedule {schedule.id}",
        f"Name: {schedule.name or 'Unnamed'}",
        f"Timezone: {schedule.timezone or rt.timezone}",
        f"Availability windows: {len(schedule.availability)}",
        f"Overrides: {len(schedule.overrides)}",
    ])
    rt.out.print_result({"schedule": schedule.raw}, human)
    return 0


# --- avail group ---
avail_group = app.group("avail", help="Availability management")
override_group = avail_group.group("override", help="Date-based overrides")
window_group = avail_group.group("window", help="Recurring weekly windows")


@override_group.command("set", help="Set availability override for a specific date")
@override_group.argument("--date", required=True, help="Date (YYYY-MM-DD)")
@override_group.argument("--start", required=True, help="Start time (HH:mm)")
@override_group.argument("--end", required=True, help="End time (HH:mm)")
@override_group.argument("--schedule-id", help=HELP_SCHEDULE_ID)
@_mutation_args
def cmd_override_set(args) -> int:
    date = parse_date(args.date)
    start = parse_time(args.start)
    end = parse_time(args.end)
    _ordered_times(start, end)

    rt = build_runtime(args)
    schedule_id = resolve_schedule_id(rt.client, args.schedule_id)
    schedule = get_schedule(rt.client, schedule_id)
    payload = merge_override_set(schedule, OverrideWindow(date, start, end, rt.timezone))

    result = run_mutation(
        args,
        rt.out,
        action="avail override set",
        target={"scheduleId": schedule_id},
        payload=payload,
        question=f"Set override on {date} ({start}-{end}) for schedule {schedule_id}?",
        mutate=lambda: patch_schedule(rt.client, schedule_id, payload),
    )
    if args.dry_run:
        return 0
    rt.out.print_result(
        {"scheduleId": schedule_id, "date": date, "start": start, "end": end, "result": result},
        f"Override set for {date} ({start}-{end}) on schedule {schedule_id}.",
    )
    return 0


@override_group.command("clear", help="Clear override for a specific date")
@override_group.argument("--date", required=True, help="Date (YYYY-MM-DD)")
@override_group.argument("--schedule-id", help=HELP_SCHEDULE_ID)
@_mutation_args
def cmd_override_clear(args) -> int:
    date = parse_date(args.date)

    rt = build_runtime(args)
    schedule_id = resolve_schedule_id(rt.client, args.schedule_id)
    schedule = get_schedule(rt.client, schedule_id)
    payload = merge_override_clear(schedule, date)

    result = run_mutation(
        args,
        rt.out,
        action="avail override clear",
        target={"scheduleId": schedule_id},
        payload=payload,
        question=f"Clear override on {date} for schedule {schedule_id}?",
        mutate=lambda: patch_schedule(rt.client, schedule_id, payload),
    )
    if args.dry_run:
        return 0
    rt.out.print_result(
        {"scheduleId": schedule_id, "date": date, "result": result},
        f"Override cleared for {date} on schedule {schedule_id}.",
    )
    return 0


@override_group.command("list", help="List overrides in date range")
@override_group.argument("--from", dest="from_date", help="From date (inclusive)")
@override_group.argument("--to", dest="to_date", help="To date (inclusive)")
@override_group.argument("--schedule-id", help=HELP_SCHEDULE_ID)
def cmd_override_list(args) -> int:
    date_range = parse_date_range(args.from_date, args.to_date)

    rt = build_runtime(args)
    schedule_id = resolve_schedule_id(rt.client, args.schedule_id)
    schedule = get_schedule(rt.client, schedule_id)
    overrides = filter_overrides_in_range(schedule.overrides, date_range)

    if rt.out.config.machine:
        rt.out.print_result({"scheduleId": schedule_id, "overrides": overrides})
        return 0
    rt.out.print_rows(
        (
            (
                text(row.get("date")),
                f"{text(row.get('startTime'))}-{text(row.get('endTime'))}",
                text(row.get("timeZone"), rt.timezone),
            )
            for row in overrides
        ),
        "No overrides found for the selected range.",
    )
    return 0


@window_group.command("set", help="Set recurring weekly availability window")
@window_group.argument("--day", required=True, help=f"Weekday ({'|'.join(WEEKDAYS)})")
@window_group.argument("--start", required=True, help="Start time (HH:mm)")
@window_group.argument("--end", required=True, help="End time (HH:mm)")
@window_group.argument("--schedule-id", help=HELP_SCHEDULE_ID)
@_mutation_args
def cmd_window_set(args) -> int:
    day = parse_weekday(args.day)
    start = parse_time(args.start)
    end = parse_time(args.end)
    _ordered_times(start, end)

    rt = build_runtime(args)
    schedule_id = resolve_schedule_id(rt.client, args.schedule_id)
    schedule = get_schedule(rt.client, schedule_id)
    payload = merge_window_set(schedule, AvailabilityWindow(day, start, end, rt.timezone))

    result = run_mutation(
        args,
        rt.out,
        action="avail window set",
        target={"scheduleId": schedule_id},
        payload=payload,
        question=f"Set recurring window {day} {start}-{end} for schedule {schedule_id}?",
        mutate=lambda: patch_schedule(rt.client, schedule_id, payload),
    )
    if args.dry_run:
        return 0
    rt.out.print_result(
        {"scheduleId": schedule_id, "day": day, "start": start, "end": end, "result": result},
        f"Updated recurring window {day} {start}-{end} on schedule {schedule_id}.",
    )
    return 0


@window_group.command("list", help="List recurring availability windows")
@window_group.argument("--schedule-id", help=HELP_SCHEDULE_ID)
def cmd_window_list(args) -> int:
    rt = build_runtime(args)
    schedule_id = resolve_schedule_id(rt.client, args.schedule_id)
    schedule = get_schedule(rt.client, schedule_id)

    if rt.out.config.machine:
        rt.out.print_result({"scheduleId": schedule_id, "availability": schedule.availability})
        return 0
    rows = []
    for item in schedule.availability:
        row = item if isinstance(item, dict) else {}
        rows.append((
            text(row.get("day") or row.get("days")),
            f"{text(row.get('startTime'))}-{text(row.get('endTime'))}",
            text(row.get("timeZone"), rt.timezone),
        ))
    rt.out.print_rows(rows, "No recurring windows found.")
    return 0


# --- link group ---
link_group = app.group("link", help="Event type link utilities")


@link_group.command("list", help="List event type links")
def cmd_link_list(args) -> int:
    rt = build_runtime(args)
    links = list_event_types(rt.client)
    if rt.out.config.machine:
        rt.out.print_result({"links": [et.raw for et in links]})
        return 0
    rt.out.print_rows(((et.id, et.slug, et.title, et.booking_url) for et in links), "No event types found.")
    return 0


@link_group.command("share", help="Output booking URL for slug")
@link_group.argument("--slug", required=True, help="Event type slug")
def cmd_link_share(args) -> int:
    rt = build_runtime(args)
    event_type = find_event_type(list_event_types(rt.client), args.slug)
    rt.out.print_result({"slug": args.slug, "bookingUrl": event_type.booking_url}, event_type.booking_url)
    return 0


# --- slot group ---
slot_group = app.group("slot", help="Slot checks")


@slot_group.command("check", help="Check slots for an event type in a time window")
@slot_group.argument("--event-type-id", required=True, help="Event type ID")
@slot_group.argument("--start", required=True, help="Start ISO datetime with offset")
@slot_group.argument("--end", required=True, help="End ISO datetime with offset")
def cmd_slot_check(args) -> int:
    start = parse_iso_datetime(args.start)
    end = parse_iso_datetime(args.end)
    require_ordered(start, end, "`--end` must be after `--start`")

    rt = build_runtime(args)
    slots = check_slots(rt.client, args.event_type_id, start, end, rt.timezone)
    human = (
        f"Slot query completed for event type {args.event_type_id}.\n"
        f"{json.dumps(slots, indent=2)}"
    )
    rt.out.print_result({"eventTypeId": args.event_type_id, "start": start, "end": end, "slots": slots}, human)
    return 0


# --- booking group ---
booking_group = app.group("booking", help="Booking operations")


@booking_group.command("list", help="List bookings")
@booking_group.argument("--today", action="store_true", help="Only bookings for today in active timezone")
@booking_group.argument("--upcoming", action="store_true", help="Only bookings starting now or later")
@booking_group.argument("--limit", type=int, help="Limit number of bookings")
def cmd_booking_list(args) -> int:
    if args.today and args.upcoming:
        raise ValidationError("Use only one of --today or --upcoming")
    limit = parse_limit(args.limit) if args.limit is not None else None

    rt = build_runtime(args)
    bookings = filter_bookings(
        list_bookings(rt.client, limit),
        timezone=rt.timezone,
        today=args.today,
        upcoming=args.upcoming,
    )
    if rt.out.config.machine:
        rt.out.print_result({"timezone": rt.timezone, "bookings": [b.raw for b in bookings]})
        return 0
    rt.out.print_rows(
        ((b.id, b.start, b.status, b.title) for b in bookings),
        "No bookings found for selected filter.",
    )
    return 0


@booking_group.command("cancel", help="Cancel a booking")
@booking_group.argument("--id", dest="booking_id", required=True, help="Booking ID")
@booking_group.argument("--reason", help="Cancellation reason")
@_mutation_args
def cmd_booking_cancel(args) -> int:
    rt = build_runtime(args)
    payload = build_booking_cancel_payload(args.reason)

    result = run_mutation(
        args,
        rt.out,
        action="booking cancel",
        target={"bookingId": args.booking_id},
        payload=payload,
        question=f"Cancel booking {args.booking_id}?",
        mutate=lambda: cancel_booking(rt.client, args.booking_id, payload),
    )
    if args.dry_run:
        return 0
    rt.out.print_result({"bookingId": args.booking_id, "result": result}, f"Booking {args.booking_id} canceled.")
    return 0


@booking_group.command("reschedule", help="Reschedule an existing booking")
@booking_group.argument("--id", dest="booking_id", required=True, help="Booking ID")
@booking_group.argument("--start", required=True, help="New start ISO datetime with offset")
@booking_group.argument("--end", required=True, help="New end ISO datetime with offset")
@_mutation_args
def cmd_booking_reschedule(args) -> int:
    start = parse_iso_datetime(args.start)
    end = parse_iso_datetime(args.end)

    rt = build_runtime(args)
    payload = build_booking_reschedule_payload(start, end, rt.timezone)

    result = run_mutation(
        args,
        rt.out,
        action="booking reschedule",
        target={"bookingId": args.booking_id},
        payload=payload,
        question=f"Reschedule booking {args.booking_id}?",
        mutate=lambda: reschedule_booking(rt.client, args.booking_id, payload),
    )
    if args.dry_run:
        return 0
    rt.out.print_result(
        {"bookingId": args.booking_id, "start": start, "end": end, "result": result},
        f"Booking {args.booking_id} rescheduled to {start} - {end}.",
    )
    return 0


def main(argv=None) -> int:
    return app.run(argv)
