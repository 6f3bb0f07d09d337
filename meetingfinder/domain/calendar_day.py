"""
Conversion between wall-clock datetimes and minutes-of-day time ranges.

Minutes-of-day are clock-time offsets (``hour * 60 + minute``), not elapsed
time since midnight. On daylight saving days a window therefore keeps the
clock times a reader expects, while its duration can differ from the real
elapsed time by the shifted hour.
"""

from typing import Tuple

import pendulum
from pendulum import Date, DateTime

from .models import END_OF_DAY, TimeRange

WEEKDAY_NAMES = {
    0: "Montag",
    1: "Dienstag",
    2: "Mittwoch",
    3: "Donnerstag",
    4: "Freitag",
    5: "Samstag",
    6: "Sonntag"
}


def day_start(day: Date, timezone: str) -> DateTime:
    """Midnight at the start of ``day`` in ``timezone``."""
    return pendulum.datetime(day.year, day.month, day.day, tz=timezone)


def to_day_range(
    start: DateTime,
    end: DateTime,
    day: Date,
    timezone: str
) -> TimeRange | None:
    """
    Clip an absolute interval to ``day`` and express it in minutes-of-day.

    Returns None if the interval does not touch the day at all.
    """
    midnight = day_start(day, timezone)
    next_midnight = midnight.add(days=1)

    if end <= midnight or start >= next_midnight or end <= start:
        return None

    clipped_start = max(start, midnight).in_timezone(timezone)
    clipped_end = min(end, next_midnight).in_timezone(timezone)

    start_minute = _clock_minute(clipped_start)
    if clipped_end == next_midnight:
        end_minute = END_OF_DAY
    else:
        end_minute = _clock_minute(clipped_end)

    if end_minute <= start_minute:
        # Inside the repeated hour of a fall-back day the clock runs backwards
        elapsed = int((clipped_end - clipped_start).total_seconds() // 60)
        end_minute = min(END_OF_DAY, start_minute + max(elapsed, 1))

    return TimeRange.from_start_end(start_minute, end_minute)


def to_datetimes(
    time_range: TimeRange,
    day: Date,
    timezone: str
) -> Tuple[DateTime, DateTime]:
    """Convert a minutes-of-day range on ``day`` back to datetimes."""
    return (
        _at_clock_minute(day, time_range.start, timezone),
        _at_clock_minute(day, time_range.end, timezone),
    )


def format_window(time_range: TimeRange, day: Date) -> str:
    """
    Format a free window for display.
    Format: Wochentag, DD.MM.YYYY | HH:MM – HH:MM Uhr (N Min.)
    """
    weekday = WEEKDAY_NAMES[day.day_of_week]
    date_str = day.format("DD.MM.YYYY")
    start_str, end_str = str(time_range).split(" - ")
    time_str = f"{start_str} – {end_str} Uhr"

    return f"{weekday}, {date_str} | {time_str} ({time_range.duration} Min.)"


def _clock_minute(moment: DateTime) -> int:
    return moment.hour * 60 + moment.minute


def _at_clock_minute(day: Date, minute: int, timezone: str) -> DateTime:
    if minute >= END_OF_DAY:
        return day_start(day, timezone).add(days=1)
    hour, mins = divmod(max(minute, 0), 60)
    return pendulum.datetime(day.year, day.month, day.day, hour, mins, tz=timezone)
