"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    END_OF_DAY,
    START_OF_DAY,
    WHOLE_DAY,
    Event,
    MeetingRequest,
    TimeRange,
)
from .meeting_query import MeetingQuery

__all__ = [
    "END_OF_DAY",
    "START_OF_DAY",
    "WHOLE_DAY",
    "Event",
    "MeetingRequest",
    "MeetingQuery",
    "TimeRange",
]
