"""
Core business logic for finding free meeting windows within a day.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from typing import Iterable, List

from .models import (
    END_OF_DAY,
    START_OF_DAY,
    WHOLE_DAY,
    Event,
    MeetingRequest,
    TimeRange,
    order_by_start,
)

logger = logging.getLogger(__name__)


class MeetingQuery:
    """
    Finds the windows of a day in which a meeting can take place.

    Algorithm:
    1. Reject requests longer than a day
    2. Collect the events of the mandatory attendees, sorted by start
    3. Drop events nested inside an earlier one
    4. Emit the gaps between events, plus the gaps at both ends of the day
    5. Remove the optional attendees' events from those windows; if nothing
       is left, fall back to the mandatory-only windows
    """

    def query(
        self,
        events: Iterable[Event],
        request: MeetingRequest
    ) -> List[TimeRange]:
        """
        Find all free windows for the request.

        Args:
            events: Existing calendar entries for the day
            request: The meeting to place

        Returns:
            Free windows sorted by start, each at least ``request.duration``
            minutes long. An empty list means no time works.
        """
        if request.duration > WHOLE_DAY.duration:
            return []

        events = list(events)
        if not events or not request.attendees:
            return [WHOLE_DAY]

        mandatory_busy = self._busy_ranges(events, request.attendees)
        mandatory_free = self._free_windows(mandatory_busy, request.duration)
        logger.debug(
            "%d mandatory conflict(s), %d free window(s)",
            len(mandatory_busy),
            len(mandatory_free),
        )

        optional = request.optional_attendees
        if not optional or optional == request.attendees:
            return mandatory_free

        optional_busy = self._busy_ranges(events, optional)
        if not optional_busy:
            return mandatory_free

        refined = self._remove_busy(mandatory_free, optional_busy, request.duration)
        if refined:
            logger.debug("Optional attendees can join in %d window(s)", len(refined))
            return refined

        logger.debug("No window fits the optional attendees, using mandatory-only windows")
        return mandatory_free

    @staticmethod
    def _busy_ranges(events: List[Event], people: frozenset) -> List[TimeRange]:
        """
        Return the sorted ranges of all events that involve any of ``people``,
        clipped to the day.
        """
        busy: List[TimeRange] = []

        for event in events:
            if not event.involves(people):
                continue

            start = max(event.when.start, START_OF_DAY)
            end = min(event.when.end, END_OF_DAY)
            # Empty or out-of-day events block no instant of the day
            if end > start:
                busy.append(TimeRange.from_start_end(start, end))

        return sorted(busy, key=order_by_start)

    def _free_windows(
        self,
        busy_ranges: List[TimeRange],
        duration: int
    ) -> List[TimeRange]:
        """
        Invert sorted busy ranges into free windows of at least ``duration``.

        Example:
        Busy: [10:00-11:00, 10:15-10:45, 10:30-12:00, 14:00-15:00]
        Result: [00:00-10:00, 12:00-14:00, 15:00-24:00]
        """
        if not busy_ranges:
            return [WHOLE_DAY]

        # Working copy, the caller's list is never touched
        busy = list(busy_ranges)
        free: List[TimeRange] = []

        first = busy[0]
        if first.start > START_OF_DAY:
            leading = TimeRange.from_start_end(START_OF_DAY, first.start)
            self._append_if_fits(free, leading, duration)

        i = 0
        while i < len(busy) - 1:
            current = busy[i]
            following = busy[i + 1]

            if not current.overlaps(following):
                gap = TimeRange.from_start_end(current.end, following.start)
                self._append_if_fits(free, gap, duration)
            elif current.contains(following):
                # Nested event: drop it and compare again at the same position
                del busy[i + 1]
                continue

            i += 1

        last = busy[-1]
        if last.end < END_OF_DAY:
            trailing = TimeRange.from_start_end(last.end, END_OF_DAY, inclusive=True)
            self._append_if_fits(free, trailing, duration)

        return free

    def _remove_busy(
        self,
        windows: List[TimeRange],
        busy_ranges: List[TimeRange],
        duration: int
    ) -> List[TimeRange]:
        """
        Subtract busy ranges from each window, keeping pieces that still fit.

        Example:
        Window: 00:00 - 24:00
        Busy: [10:00-24:00]
        Result: [00:00-10:00]
        """
        remaining: List[TimeRange] = []

        for window in windows:
            current_start = window.start

            for busy in busy_ranges:
                if not window.overlaps(busy):
                    continue

                gap = TimeRange.from_start_end(current_start, max(current_start, busy.start))
                self._append_if_fits(remaining, gap, duration)

                current_start = max(current_start, min(busy.end, window.end))

            if current_start < window.end:
                rest = TimeRange.from_start_end(current_start, window.end)
                self._append_if_fits(remaining, rest, duration)

        return remaining

    @staticmethod
    def _append_if_fits(
        windows: List[TimeRange],
        candidate: TimeRange,
        duration: int
    ) -> None:
        # Empty windows carry no meeting time even for a zero-minute request
        if candidate.duration > 0 and candidate.duration >= duration:
            windows.append(candidate)
