"""
Adapters layer - Calendar sources (Microsoft Graph API, local event files).
"""

from .event_file_client import SAMPLE_EVENTS_FILE, EventFileClient
from .graph_authenticator import GraphAuthenticator
from .graph_client import GraphClient

__all__ = ["EventFileClient", "GraphAuthenticator", "GraphClient", "SAMPLE_EVENTS_FILE"]
