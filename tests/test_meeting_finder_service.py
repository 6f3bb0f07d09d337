"""
Tests for the MeetingFinderService orchestration layer.
"""

from typing import Dict, List

import pendulum

from meetingfinder.domain.models import END_OF_DAY, START_OF_DAY, Event, MeetingRequest, TimeRange
from meetingfinder.services.meeting_finder import MeetingFinderService

TZ = "Europe/Berlin"
MONDAY = pendulum.date(2024, 11, 25)


class StubCalendarClient:
    """Minimal stub matching CalendarClientProtocol."""

    def __init__(self, events: List[Event]):
        self._events = events
        self.calls: List[Dict[str, object]] = []

    def get_events(self, emails, day, timezone):
        self.calls.append({"emails": tuple(emails), "day": day, "timezone": timezone})
        wanted = frozenset(emails)
        return [event for event in self._events if event.involves(wanted)]


def test_fetch_events_asks_for_everyone_invited():
    """Mandatory and optional participants are both fetched."""
    client = StubCalendarClient([])
    service = MeetingFinderService(calendar_client=client)
    request = MeetingRequest(30, {"b@example.com"}, {"a@example.com"})

    service.find_times(day=MONDAY, request=request, timezone=TZ)

    assert client.calls == [
        {"emails": ("a@example.com", "b@example.com"), "day": MONDAY, "timezone": TZ}
    ]


def test_no_participants_skips_calendar():
    client = StubCalendarClient([])
    service = MeetingFinderService(calendar_client=client)

    assert service.fetch_events(participants=[], day=MONDAY, timezone=TZ) == []
    assert client.calls == []


def test_find_times_uses_calendar_data_and_query():
    """End-to-end call should yield the calculated windows."""
    events = [
        Event("Review", TimeRange.from_start_end(600, 660), {"a@example.com"}),
        Event("Lunch", TimeRange.from_start_end(720, 780), {"c@example.com"}),
    ]
    service = MeetingFinderService(calendar_client=StubCalendarClient(events))
    request = MeetingRequest(30, {"a@example.com", "b@example.com"})

    windows = service.find_times(day=MONDAY, request=request, timezone=TZ)

    assert windows == [
        TimeRange.from_start_end(START_OF_DAY, 600),
        TimeRange.from_start_end(660, END_OF_DAY),
    ]
