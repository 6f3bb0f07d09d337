"""
Calendar source backed by a local JSON or YAML event file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pendulum
import yaml
from pendulum import Date

from ..domain.calendar_day import to_day_range
from ..domain.exceptions import EventDataError
from ..domain.models import Event

logger = logging.getLogger(__name__)

SAMPLE_EVENTS_FILE = Path(__file__).parent / "sample_events.json"


class EventFileClient:
    """
    Client that reads calendar events from a file instead of a remote API.

    The file holds a list of records:

        [
            {
                "title": "Standup",
                "start": "2024-11-25T09:00:00",
                "end": "2024-11-25T09:15:00",
                "attendees": ["alice@example.com", "bob@example.com"]
            }
        ]

    Files ending in ``.yaml``/``.yml`` are read as YAML, everything else as
    JSON. Naive datetimes are interpreted in the requested timezone.
    """

    def __init__(self, events_file: Path = SAMPLE_EVENTS_FILE):
        """
        Initialize the client.

        Args:
            events_file: Path to the event file (defaults to the bundled sample data)
        """
        self.events_file = Path(events_file)
        self.records = self._load_records()

    def _load_records(self) -> List[Dict[str, Any]]:
        """Load raw event records from the file."""
        if not self.events_file.exists():
            raise EventDataError(f"Event file not found: {self.events_file}")

        try:
            with open(self.events_file, "r", encoding="utf-8") as f:
                if self.events_file.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or []
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise EventDataError(f"Could not read event file {self.events_file}: {exc}") from exc

        if isinstance(data, dict):
            data = data.get("events", [])

        if not isinstance(data, list):
            raise EventDataError("Event file must contain a list of events.")

        return data

    def get_events(
        self,
        emails: Sequence[str],
        day: Date,
        timezone: str = "Europe/Berlin"
    ) -> List[Event]:
        """
        Return the events on ``day`` attended by any of ``emails``.

        Args:
            emails: Participant email addresses
            day: Calendar day to look at
            timezone: IANA timezone identifier

        Returns:
            Events with their times clipped to the day
        """
        wanted = {email.lower() for email in emails}
        events: List[Event] = []

        for record in self.records:
            try:
                attendees = {str(a).lower() for a in record.get("attendees", [])}
                if wanted.isdisjoint(attendees):
                    continue

                start = pendulum.parse(str(record["start"]), tz=timezone)
                end = pendulum.parse(str(record["end"]), tz=timezone)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid event record %r: %s", record, exc)
                continue

            when = to_day_range(start, end, day, timezone)
            if when is None:
                continue

            events.append(
                Event(
                    title=str(record.get("title", "")),
                    when=when,
                    attendees=frozenset(attendees),
                )
            )

        logger.debug("Loaded %d event(s) from %s", len(events), self.events_file)
        return events
