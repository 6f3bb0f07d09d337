"""
Domain models for time ranges, calendar events and meeting requests.

All times are minutes-of-day: ``0`` is midnight at the start of the day and
``1440`` is midnight at its end.
"""

from dataclasses import dataclass, field
from typing import Iterable

START_OF_DAY = 0
END_OF_DAY = 24 * 60


def _clock(minutes: int) -> str:
    """Render minutes-of-day as HH:MM (the end of the day renders as 24:00)."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


@dataclass(frozen=True, order=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: duration is never negative, ``end == start + duration``.
    Ordering compares ``start`` first, ``duration`` breaks ties.
    """
    start: int
    duration: int

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"Duration must not be negative, got {self.duration}")

    @property
    def end(self) -> int:
        return self.start + self.duration

    @classmethod
    def from_start_duration(cls, start: int, duration: int) -> "TimeRange":
        """Create a range starting at ``start`` lasting ``duration`` minutes."""
        return cls(start=start, duration=duration)

    @classmethod
    def from_start_end(cls, start: int, end: int, inclusive: bool = False) -> "TimeRange":
        """
        Create a range from its boundaries.

        With ``inclusive`` the minute starting at ``end`` belongs to the range
        as well. The day has no minute after ``END_OF_DAY``, so an inclusive
        end at or past ``END_OF_DAY`` is kept as given.
        """
        if inclusive and end < END_OF_DAY:
            end += 1
        return cls(start=start, duration=end - start)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range shares any instant with another."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeRange") -> bool:
        """Check if ``other`` lies entirely within (or equals) this range."""
        return self.start <= other.start and self.end >= other.end

    def __str__(self) -> str:
        return f"{_clock(self.start)} - {_clock(self.end)}"


WHOLE_DAY = TimeRange.from_start_end(START_OF_DAY, END_OF_DAY)


def order_by_start(time_range: TimeRange) -> int:
    """Sort key used for every ordering of time ranges."""
    return time_range.start


def _attendee_set(attendees: Iterable[str]) -> frozenset:
    if isinstance(attendees, str):
        # A bare string would otherwise become a set of characters
        return frozenset([attendees])
    return frozenset(attendees)


@dataclass(frozen=True)
class Event:
    """
    An existing calendar entry.

    The title is for display only; the query looks at ``when`` and
    ``attendees``.
    """
    title: str
    when: TimeRange
    attendees: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "attendees", _attendee_set(self.attendees))

    def involves(self, people: frozenset) -> bool:
        """Check if at least one of ``people`` attends this event."""
        return not self.attendees.isdisjoint(people)


@dataclass(frozen=True)
class MeetingRequest:
    """
    The meeting to find a time for.

    ``attendees`` are mandatory; ``optional_attendees`` are honoured when
    possible.
    """
    duration: int
    attendees: frozenset = field(default_factory=frozenset)
    optional_attendees: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"Meeting duration must not be negative, got {self.duration}")
        object.__setattr__(self, "attendees", _attendee_set(self.attendees))
        object.__setattr__(
            self, "optional_attendees", _attendee_set(self.optional_attendees)
        )

    @property
    def everyone(self) -> frozenset:
        """Mandatory and optional attendees together."""
        return self.attendees | self.optional_attendees
