"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .meeting_finder import CalendarClientProtocol, MeetingFinderService

__all__ = ["CalendarClientProtocol", "MeetingFinderService"]
