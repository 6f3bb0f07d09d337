"""
Domain-specific exception hierarchy for the meeting finder application.
"""


class MeetingFinderError(Exception):
    """Base class for all application-level errors."""


class CalendarAPIError(MeetingFinderError):
    """Raised when calendar data cannot be fetched or parsed."""


class AuthenticationError(MeetingFinderError):
    """Raised when authentication or token handling fails."""


class EventDataError(MeetingFinderError):
    """Raised when a local event file cannot be read."""
