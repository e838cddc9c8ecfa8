import unittest

from calcom_assistant.api import (
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
from calcom_assistant.errors import MissingBookingUrlError, NotFoundError
from calcom_assistant.models import EventType
from tests.calcom_tests.fixtures import FakeCalClient, make_schedule


class ScheduleApiTests(unittest.TestCase):
    def test_list_reads_data_array(self):
        client = FakeCalClient({("GET", "/v2/schedules"): {"data": [make_schedule(3), make_schedule(4)]}})
        self.assertEqual([s.id for s in list_schedules(client)], ["3", "4"])
        self.assertEqual(client.calls[0]["endpoint"], "schedules")

    def test_list_reads_nested_shape(self):
        client = FakeCalClient({("GET", "/v2/schedules"): {"data": {"schedules": [make_schedule(5)]}}})
        self.assertEqual([s.id for s in list_schedules(client)], ["5"])

    def test_get_unwraps_data(self):
        client = FakeCalClient({("GET", "/v2/schedules/7"): {"status": "success", "data": make_schedule(7)}})
        schedule = get_schedule(client, "7")
        self.assertEqual(schedule.id, "7")
        self.assertEqual(schedule.timezone, "Europe/Oslo")

    def test_patch_sends_payload(self):
        client = FakeCalClient({("PATCH", "/v2/schedules/7"): {"status": "success"}})
        patch_schedule(client, "7", {"availability": [], "overrides": []})
        self.assertEqual(client.calls[0]["body"], {"availability": [], "overrides": []})

    def test_resolve_explicit_skips_lookup(self):
        client = FakeCalClient()
        self.assertEqual(resolve_schedule_id(client, "12"), "12")
        self.assertEqual(client.calls, [])

    def test_resolve_uses_first_schedule(self):
        client = FakeCalClient({("GET", "/v2/schedules"): {"data": [make_schedule(9), make_schedule(10)]}})
        self.assertEqual(resolve_schedule_id(client), "9")

    def test_resolve_without_schedules(self):
        client = FakeCalClient({("GET", "/v2/schedules"): {"data": []}})
        with self.assertRaises(NotFoundError) as ctx:
            resolve_schedule_id(client)
        self.assertEqual(str(ctx.exception), "No schedules available for this account.")


class EventTypeApiTests(unittest.TestCase):
    def test_list_flat(self):
        client = FakeCalClient({
            ("GET", "/v2/event-types"): {"data": [{"id": 1, "slug": "intro", "title": "Intro", "bookingUrl": "https://cal.com/me/intro"}]},
        })
        links = list_event_types(client)
        self.assertEqual(links[0].slug, "intro")
        self.assertEqual(links[0].booking_url, "https://cal.com/me/intro")
        self.assertEqual(client.calls[0]["endpoint"], "eventTypes")

    def test_list_grouped(self):
        client = FakeCalClient({
            ("GET", "/v2/event-types"): {
                "data": {"eventTypeGroups": [{"eventTypes": [{"id": 1, "slug": "a"}]}, {"eventTypes": [{"id": 2, "slug": "b"}]}]},
            },
        })
        self.assertEqual([e.slug for e in list_event_types(client)], ["a", "b"])

    def test_find_by_slug(self):
        types = [EventType(id="1", slug="a", booking_url="https://cal.com/me/a"), EventType(id="2", slug="b")]
        self.assertEqual(find_event_type(types, "a").id, "1")
        with self.assertRaises(MissingBookingUrlError) as ctx:
            find_event_type(types, "b")
        self.assertEqual(ctx.exception.code, "MISSING_BOOKING_URL")
        with self.assertRaises(NotFoundError) as ctx:
            find_event_type(types, "zzz")
        self.assertEqual(str(ctx.exception), "No event type found for slug: zzz")


class SlotAndBookingApiTests(unittest.TestCase):
    def test_check_slots_query(self):
        client = FakeCalClient({("GET", "/v2/slots"): {"data": {}}})
        check_slots(client, "42", "2026-03-02T09:00:00+01:00", "2026-03-02T17:00:00+01:00", "Europe/Oslo")
        call = client.calls[0]
        self.assertEqual(call["endpoint"], "slots")
        self.assertEqual(
            call["query"],
            {
                "eventTypeId": "42",
                "start": "2026-03-02T09:00:00+01:00",
                "end": "2026-03-02T17:00:00+01:00",
                "timeZone": "Europe/Oslo",
            },
        )

    def test_list_bookings_passes_limit(self):
        client = FakeCalClient({
            ("GET", "/v2/bookings"): {"data": [{"uid": "abc", "startTime": "2026-03-02T08:00:00Z", "status": "accepted"}]},
        })
        bookings = list_bookings(client, 5)
        self.assertEqual(client.calls[0]["query"], {"limit": 5})
        self.assertEqual(bookings[0].id, "abc")
        self.assertEqual(bookings[0].start, "2026-03-02T08:00:00Z")

    def test_cancel_and_reschedule_paths(self):
        client = FakeCalClient({
            ("POST", "/v2/bookings/b1/cancel"): {"status": "success"},
            ("POST", "/v2/bookings/b1/reschedule"): {"status": "success"},
        })
        cancel_booking(client, "b1", {"reason": "sick"})
        reschedule_booking(client, "b1", {"start": "s", "end": "e", "timeZone": "UTC"})
        self.assertEqual([c["endpoint"] for c in client.calls], ["bookings", "bookings"])
        self.assertEqual(client.calls[0]["body"], {"reason": "sick"})


if __name__ == "__main__":
    unittest.main()
