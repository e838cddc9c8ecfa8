import datetime as dt
import unittest

from calcom_assistant.errors import ValidationError
from calcom_assistant.models import AvailabilityWindow, Booking, OverrideWindow, Schedule
from calcom_assistant.payloads import (
    build_booking_cancel_payload,
    build_booking_reschedule_payload,
    filter_bookings,
    filter_overrides_in_range,
    merge_override_clear,
    merge_override_set,
    merge_window_set,
)
from calcom_assistant.validators import DateRange

OSLO = "Europe/Oslo"


class OverrideMergeTests(unittest.TestCase):
    def test_set_replaces_same_date_and_appends_last(self):
        schedule = {
            "availability": [],
            "overrides": [
                {"date": "2026-03-02", "startTime": "08:00", "endTime": "12:00", "timeZone": OSLO},
                {"date": "2026-03-03", "startTime": "09:00", "endTime": "10:00", "timeZone": OSLO},
            ],
        }
        out = merge_override_set(schedule, OverrideWindow("2026-03-02", "10:00", "14:00", OSLO))
        self.assertEqual(
            out["overrides"],
            [
                {"date": "2026-03-03", "startTime": "09:00", "endTime": "10:00", "timeZone": OSLO},
                {"date": "2026-03-02", "startTime": "10:00", "endTime": "14:00", "timeZone": OSLO},
            ],
        )
        self.assertEqual(out["availability"], [])

    def test_set_on_empty_schedule(self):
        out = merge_override_set({}, OverrideWindow("2026-03-02", "10:00", "14:00", OSLO))
        self.assertEqual(out["availability"], [])
        self.assertEqual(len(out["overrides"]), 1)

    def test_availability_echoed_untouched(self):
        windows = [{"day": "mon", "startTime": "09:00", "endTime": "17:00"}]
        out = merge_override_set({"availability": windows}, OverrideWindow("2026-03-02", "10:00", "14:00", OSLO))
        self.assertEqual(out["availability"], windows)

    def test_malformed_entries_kept(self):
        schedule = {"overrides": ["junk", {"startTime": "09:00"}, {"date": "2026-03-02"}]}
        out = merge_override_set(schedule, OverrideWindow("2026-03-02", "10:00", "14:00", OSLO))
        self.assertEqual(out["overrides"][:2], ["junk", {"startTime": "09:00"}])
        self.assertEqual(len(out["overrides"]), 3)

    def test_clear_removes_date_only(self):
        schedule = Schedule(
            id="1",
            availability=[{"day": "tue", "startTime": "09:00", "endTime": "17:00"}],
            overrides=[{"date": "2026-03-02"}, {"date": "2026-03-05"}],
        )
        out = merge_override_clear(schedule, "2026-03-02")
        self.assertEqual(out["overrides"], [{"date": "2026-03-05"}])
        self.assertEqual(out["availability"], schedule.availability)

    def test_clear_without_match_is_unchanged(self):
        overrides = [{"date": "2026-03-05"}]
        out = merge_override_clear({"overrides": overrides}, "2026-03-02")
        self.assertEqual(out["overrides"], overrides)

    def test_clear_keeps_malformed_entries(self):
        schedule = {"overrides": ["junk", {"startTime": "09:00"}, {"date": "2026-03-02"}]}
        out = merge_override_clear(schedule, "2026-03-02")
        self.assertEqual(out["overrides"], ["junk", {"startTime": "09:00"}])

    def test_input_not_mutated(self):
        overrides = [{"date": "2026-03-02"}]
        schedule = {"overrides": overrides}
        merge_override_clear(schedule, "2026-03-02")
        self.assertEqual(overrides, [{"date": "2026-03-02"}])


class WindowMergeTests(unittest.TestCase):
    def test_replaces_all_windows_for_day(self):
        schedule = {
            "availability": [
                {"day": "mon", "startTime": "08:00", "endTime": "10:00"},
                {"day": "tue", "startTime": "09:00", "endTime": "17:00"},
                {"day": "mon", "startTime": "13:00", "endTime": "15:00"},
            ],
            "overrides": [{"date": "2026-03-02"}],
        }
        out = merge_window_set(schedule, AvailabilityWindow("mon", "09:00", "17:00", OSLO))
        self.assertEqual(
            out["availability"],
            [
                {"day": "tue", "startTime": "09:00", "endTime": "17:00"},
                {"day": "mon", "startTime": "09:00", "endTime": "17:00", "timeZone": OSLO},
            ],
        )
        self.assertEqual(out["overrides"], [{"date": "2026-03-02"}])

    def test_malformed_entries_kept(self):
        schedule = {"availability": ["junk", {"startTime": "09:00"}, {"day": "mon"}]}
        out = merge_window_set(schedule, AvailabilityWindow("mon", "09:00", "17:00", OSLO))
        self.assertEqual(
            out["availability"],
            ["junk", {"startTime": "09:00"}, {"day": "mon", "startTime": "09:00", "endTime": "17:00", "timeZone": OSLO}],
        )


class BookingPayloadTests(unittest.TestCase):
    def test_cancel_reason_optional(self):
        self.assertEqual(build_booking_cancel_payload(), {})
        self.assertEqual(build_booking_cancel_payload(""), {})
        self.assertEqual(build_booking_cancel_payload("conflict"), {"reason": "conflict"})

    def test_reschedule_payload(self):
        payload = build_booking_reschedule_payload("2026-03-02T09:00:00+01:00", "2026-03-02T10:00:00+01:00", OSLO)
        self.assertEqual(
            payload,
            {"start": "2026-03-02T09:00:00+01:00", "end": "2026-03-02T10:00:00+01:00", "timeZone": OSLO},
        )

    def test_reschedule_rejects_reversed_range(self):
        with self.assertRaises(ValidationError) as ctx:
            build_booking_reschedule_payload("2026-03-02T10:00:00+01:00", "2026-03-02T09:00:00+01:00", OSLO)
        self.assertIn("Reschedule end time must be after start time", str(ctx.exception))


class FilterTests(unittest.TestCase):
    def test_overrides_in_range_inclusive(self):
        overrides = [{"date": "2026-03-01"}, {"date": "2026-03-02"}, {"date": "2026-03-05"}, "junk", {"x": 1}]
        out = filter_overrides_in_range(overrides, DateRange("2026-03-02", "2026-03-05"))
        self.assertEqual(out, [{"date": "2026-03-02"}, {"date": "2026-03-05"}])

    def test_overrides_open_range(self):
        overrides = [{"date": "2026-03-01"}, {"date": "2026-03-02"}]
        self.assertEqual(filter_overrides_in_range(overrides, DateRange()), overrides)

    def _bookings(self):
        return [
            Booking(id="1", start="2026-03-02T08:00:00.000Z"),
            Booking(id="2", start="2026-03-02T22:30:00.000Z"),
            Booking(id="3", start="2026-03-01T09:00:00.000Z"),
            Booking(id="4", start=""),
        ]

    def test_today_uses_local_date_prefix(self):
        now = dt.datetime(2026, 3, 2, 12, 0, tzinfo=dt.timezone.utc)
        out = filter_bookings(self._bookings(), timezone=OSLO, today=True, now=now)
        self.assertEqual([b.id for b in out], ["1", "2"])

    def test_upcoming_keeps_future(self):
        now = dt.datetime(2026, 3, 2, 12, 0, tzinfo=dt.timezone.utc)
        out = filter_bookings(self._bookings(), timezone=OSLO, upcoming=True, now=now)
        self.assertEqual([b.id for b in out], ["2"])

    def test_no_filter_drops_startless(self):
        out = filter_bookings(self._bookings(), timezone=OSLO)
        self.assertEqual([b.id for b in out], ["1", "2", "3"])

    def test_both_filters_rejected(self):
        with self.assertRaises(ValidationError):
            filter_bookings([], timezone=OSLO, today=True, upcoming=True)


if __name__ == "__main__":
    unittest.main()
