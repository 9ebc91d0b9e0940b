"""Eventline event operations."""
from __future__ import annotations

from eventline_provider.core import validators
from .client import EventlineClient, url_path
from .models import Event


class EventService:
    """Service for Eventline events."""

    def __init__(self, client: EventlineClient):
        self.client = client

    def replay(self, event_id: str) -> Event:
        """Replay an event, triggering its jobs again.

        Returns:
            The new event created by the replay
        """
        eid = validators.parse_id(event_id, "event_id")
        return self.client.post(url_path("events", "id", eid, "replay"), dest=Event.from_dict)
