"""Eventline identity operations.

Identities live inside a project: every method requires a client bound to
that project (see ``EventlineClient.for_project``).
"""
from __future__ import annotations

from typing import List, Optional

from eventline_provider.core import validators
from .client import EventlineClient, url_path
from .exceptions import ValidationError
from .models import Identity
from .pagination import Cursor, fetch_all

IDENTITY_SORTS = ["id", "name"]


class IdentityService:
    """Service for managing Eventline identities."""

    def __init__(self, client: EventlineClient):
        """Initialize identity service.

        Args:
            client: Eventline client bound to a project

        Raises:
            ValidationError: If the client is not bound to a project
        """
        if client.project_id is None:
            raise ValidationError("identity operations require a project-scoped client")
        self.client = client

    def list(self, cursor: Optional[Cursor] = None, sort: Optional[str] = None) -> List[Identity]:
        """Return every identity of the project.

        Args:
            cursor: Starting cursor (default: pages of 20)
            sort: Sort key, one of IDENTITY_SORTS
        """
        cursor = cursor or Cursor()
        if sort:
            cursor = cursor.with_sort(sort, IDENTITY_SORTS)
        return fetch_all(self.client, "/identities", Identity.from_dict, cursor)

    def get_by_id(self, identity_id: str) -> Identity:
        iid = validators.parse_id(identity_id, "identity_id")
        return self.client.get(url_path("identities", "id", iid), dest=Identity.from_dict)

    def create(self, identity: Identity) -> Identity:
        """Create an identity; the server assigns its id and status."""
        return self.client.post("/identities", identity, dest=Identity.from_dict)

    def update(self, identity: Identity) -> Identity:
        """Replace an identity with the given representation.

        Returns:
            The identity as stored by the server (status may change)
        """
        iid = validators.parse_id(identity.id, "identity_id")
        return self.client.put(url_path("identities", "id", iid), identity, dest=Identity.from_dict)

    def delete(self, identity_id: str) -> None:
        iid = validators.parse_id(identity_id, "identity_id")
        self.client.delete(url_path("identities", "id", iid))
