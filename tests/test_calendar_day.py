"""
Tests for converting datetimes to minutes-of-day ranges.
"""

import pendulum

from meetingfinder.domain.calendar_day import format_window, to_datetimes, to_day_range
from meetingfinder.domain.models import END_OF_DAY, TimeRange

TZ = "Europe/Berlin"
MONDAY = pendulum.date(2024, 11, 25)


def test_event_within_day():
    start = pendulum.parse("2024-11-25 10:00", tz=TZ)
    end = pendulum.parse("2024-11-25 11:30", tz=TZ)

    assert to_day_range(start, end, MONDAY, TZ) == TimeRange.from_start_end(600, 690)


def test_event_crossing_midnight_is_clipped():
    """An overnight event only blocks the part that falls on the day."""
    start = pendulum.parse("2024-11-25 22:00", tz=TZ)
    end = pendulum.parse("2024-11-26 06:00", tz=TZ)

    assert to_day_range(start, end, MONDAY, TZ) == TimeRange.from_start_end(1320, END_OF_DAY)


def test_event_from_previous_day_is_clipped():
    start = pendulum.parse("2024-11-24 22:00", tz=TZ)
    end = pendulum.parse("2024-11-25 06:00", tz=TZ)

    assert to_day_range(start, end, MONDAY, TZ) == TimeRange.from_start_end(0, 360)


def test_event_on_other_day_is_ignored():
    start = pendulum.parse("2024-11-26 10:00", tz=TZ)
    end = pendulum.parse("2024-11-26 11:00", tz=TZ)

    assert to_day_range(start, end, MONDAY, TZ) is None


def test_event_in_other_timezone_is_converted():
    start = pendulum.parse("2024-11-25 09:00", tz="UTC")  # 10:00 in Berlin
    end = pendulum.parse("2024-11-25 10:00", tz="UTC")

    assert to_day_range(start, end, MONDAY, TZ) == TimeRange.from_start_end(600, 660)


def test_to_datetimes():
    start, end = to_datetimes(TimeRange.from_start_end(600, END_OF_DAY), MONDAY, TZ)

    assert start == pendulum.parse("2024-11-25 10:00", tz=TZ)
    assert end == pendulum.parse("2024-11-26 00:00", tz=TZ)


def test_format_window():
    text = format_window(TimeRange.from_start_end(600, 660), MONDAY)

    assert text == "Montag, 25.11.2024 | 10:00 – 11:00 Uhr (60 Min.)"


def test_format_window_until_end_of_day():
    text = format_window(TimeRange.from_start_end(1020, END_OF_DAY), MONDAY)

    assert text == "Montag, 25.11.2024 | 17:00 – 24:00 Uhr (420 Min.)"


class TestDaylightSavingDays:
    """Minutes-of-day follow the wall clock on days with a DST switch."""

    FALL_BACK = pendulum.date(2024, 10, 27)  # 25 hours in Europe/Berlin
    SPRING_FORWARD = pendulum.date(2024, 3, 31)  # 23 hours in Europe/Berlin

    def test_late_event_on_fall_back_day_is_kept(self):
        """The last hour of a 25-hour day is still part of the day."""
        start = pendulum.parse("2024-10-27 23:00", tz=TZ)
        end = pendulum.parse("2024-10-28 00:00", tz=TZ)

        assert to_day_range(start, end, self.FALL_BACK, TZ) == TimeRange.from_start_end(1380, END_OF_DAY)

    def test_event_after_switch_keeps_clock_times(self):
        start = pendulum.parse("2024-03-31 10:00", tz=TZ)
        end = pendulum.parse("2024-03-31 11:00", tz=TZ)

        assert to_day_range(start, end, self.SPRING_FORWARD, TZ) == TimeRange.from_start_end(600, 660)

    def test_format_window_on_spring_forward_day(self):
        start = pendulum.parse("2024-03-31 10:00", tz=TZ)
        end = pendulum.parse("2024-03-31 11:00", tz=TZ)
        window = to_day_range(start, end, self.SPRING_FORWARD, TZ)

        assert format_window(window, self.SPRING_FORWARD) == (
            "Sonntag, 31.03.2024 | 10:00 – 11:00 Uhr (60 Min.)"
        )

    def test_to_datetimes_on_spring_forward_day(self):
        start, end = to_datetimes(TimeRange.from_start_end(600, 660), self.SPRING_FORWARD, TZ)

        assert start == pendulum.parse("2024-03-31 10:00", tz=TZ)
        assert end == pendulum.parse("2024-03-31 11:00", tz=TZ)

    def test_whole_fall_back_day_is_one_range(self):
        start = pendulum.parse("2024-10-27 00:00", tz=TZ)
        end = pendulum.parse("2024-10-28 00:00", tz=TZ)

        assert to_day_range(start, end, self.FALL_BACK, TZ) == TimeRange.from_start_end(0, END_OF_DAY)
