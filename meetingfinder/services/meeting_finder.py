"""
Application service for finding a meeting time on one day.

The service fetches events through a calendar client adapter and delegates
the actual availability calculation to the domain-level ``MeetingQuery``.
Any object with a matching ``get_events`` method can act as the calendar
client, which keeps the CLI thin and the service easy to test.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, Sequence

from pendulum import Date

from ..domain.meeting_query import MeetingQuery
from ..domain.models import Event, MeetingRequest, TimeRange

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    def get_events(
        self,
        emails: Sequence[str],
        day: Date,
        timezone: str,
    ) -> List[Event]:
        """Return the events on ``day`` that involve any of ``emails``."""


class MeetingFinderService:
    """Orchestrates event retrieval and the meeting query."""

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        meeting_query: MeetingQuery | None = None,
    ) -> None:
        self._calendar_client = calendar_client
        self._meeting_query = meeting_query or MeetingQuery()

    def find_times(
        self,
        *,
        day: Date,
        request: MeetingRequest,
        timezone: str,
    ) -> List[TimeRange]:
        """Fetch the day's events for everyone invited and compute free windows."""
        events = self.fetch_events(
            participants=sorted(request.everyone),
            day=day,
            timezone=timezone,
        )
        return self._meeting_query.query(events, request)

    def fetch_events(
        self,
        *,
        participants: Sequence[str],
        day: Date,
        timezone: str,
    ) -> List[Event]:
        """Fetch the events of the requested participants."""
        participant_list = list(participants)
        if not participant_list:
            return []

        events = self._calendar_client.get_events(
            emails=participant_list,
            day=day,
            timezone=timezone,
        )
        logger.debug(
            "Fetched %d event(s) for %d participant(s) on %s",
            len(events),
            len(participant_list),
            day,
        )
        return list(events)
