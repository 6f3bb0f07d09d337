"""
Microsoft Graph API client for fetching calendar data.
"""

import logging
from typing import Any, Dict, List, Sequence

import pendulum
import requests
from pendulum import Date, DateTime

from ..domain.calendar_day import day_start, to_day_range
from ..domain.exceptions import CalendarAPIError
from ..domain.models import Event

logger = logging.getLogger(__name__)

# Schedule item statuses that block a participant
BUSY_STATUSES = {"busy", "tentative", "oof", "workingelsewhere"}


class GraphClient:
    """
    Client for Microsoft Graph API calendar operations.

    Uses the /calendar/getSchedule endpoint to fetch free/busy information.
    """

    GRAPH_API_ENDPOINT = "https://graph.microsoft.com/v1.0"

    def __init__(self, access_token: str):
        """
        Initialize the Graph API client.

        Args:
            access_token: Valid Microsoft Graph access token
        """
        self.access_token = access_token
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    def get_events(
        self,
        emails: Sequence[str],
        day: Date,
        timezone: str = "Europe/Berlin"
    ) -> List[Event]:
        """
        Get the busy schedule items of several users for one day.

        Each busy item becomes an Event attended by the schedule owner.

        Args:
            emails: List of user email addresses
            day: Calendar day to fetch
            timezone: IANA timezone identifier

        Returns:
            Events with their times clipped to the day

        Raises:
            CalendarAPIError: If the API call fails
        """
        url = f"{self.GRAPH_API_ENDPOINT}/me/calendar/getSchedule"
        start_time = day_start(day, timezone)
        end_time = start_time.add(days=1)

        payload = {
            "schedules": list(emails),
            "startTime": {
                "dateTime": start_time.format("YYYY-MM-DD[T]HH:mm:ss"),
                "timeZone": timezone
            },
            "endTime": {
                "dateTime": end_time.format("YYYY-MM-DD[T]HH:mm:ss"),
                "timeZone": timezone
            },
            "availabilityViewInterval": 15
        }

        try:
            response = requests.post(
                url,
                headers=self.headers,
                json=payload,
                timeout=30
            )
            response.raise_for_status()
            data = response.json()

        except (requests.exceptions.RequestException, ValueError) as e:
            raise CalendarAPIError(f"Failed to fetch schedule from Microsoft Graph: {e}") from e

        return self._parse_schedule_response(data, day, timezone)

    def _parse_schedule_response(
        self,
        response_data: Dict[str, Any],
        day: Date,
        timezone: str
    ) -> List[Event]:
        """
        Parse the getSchedule API response into our domain model.

        Response format:
        {
            "value": [
                {
                    "scheduleId": "user@example.com",
                    "scheduleItems": [
                        {
                            "status": "busy",
                            "subject": "...",
                            "start": {"dateTime": "...", "timeZone": "..."},
                            "end": {"dateTime": "...", "timeZone": "..."}
                        }
                    ]
                }
            ]
        }
        """
        events: List[Event] = []

        for schedule in response_data.get("value", []):
            email = schedule.get("scheduleId", "").lower()

            if "error" in schedule:
                raise CalendarAPIError(
                    f"Schedule for {email} unavailable: "
                    f"{schedule['error'].get('message', 'unknown error')}"
                )

            for item in schedule.get("scheduleItems", []):
                status = item.get("status", "").lower()
                if status not in BUSY_STATUSES:
                    continue

                try:
                    start = self._parse_datetime(item["start"], timezone)
                    end = self._parse_datetime(item["end"], timezone)
                except (KeyError, ValueError) as e:
                    logger.warning("Could not parse schedule item for %s: %s", email, e)
                    continue

                when = to_day_range(start, end, day, timezone)
                if when is None:
                    continue

                events.append(
                    Event(
                        title=item.get("subject") or status,
                        when=when,
                        attendees=frozenset([email]),
                    )
                )

        return events

    def _parse_datetime(self, value: Dict[str, str], timezone: str) -> DateTime:
        """
        Parse a Graph dateTimeTimeZone object into a DateTime in ``timezone``.

        Graph sends naive datetimes together with the zone they are expressed in.
        """
        dt = pendulum.parse(value["dateTime"], tz=value.get("timeZone") or "UTC")

        if isinstance(dt, DateTime):
            return dt.in_timezone(timezone)

        raise ValueError(f"Could not parse datetime: {value['dateTime']}")

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the connection and authentication by fetching user profile.

        Returns:
            User profile data

        Raises:
            CalendarAPIError: If connection test fails
        """
        url = f"{self.GRAPH_API_ENDPOINT}/me"

        try:
            response = requests.get(url, headers=self.headers, timeout=10)
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Connection test failed: {e}") from e
