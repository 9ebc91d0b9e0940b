"""Eventline project operations."""
from __future__ import annotations

from typing import List, Optional

from eventline_provider.core import validators
from .client import EventlineClient, url_path
from .exceptions import ValidationError
from .models import Project
from .pagination import Cursor, fetch_all

PROJECT_SORTS = ["id", "name"]


class ProjectService:
    """Service for managing Eventline projects.

    Projects are not scoped: the client does not need to be bound.
    """

    def __init__(self, client: EventlineClient):
        """Initialize project service.

        Args:
            client: Eventline client
        """
        self.client = client

    def list(self, cursor: Optional[Cursor] = None, sort: Optional[str] = None) -> List[Project]:
        """Return every project visible with the configured API key.

        Args:
            cursor: Starting cursor (default: pages of 20)
            sort: Sort key, one of PROJECT_SORTS

        Raises:
            ValidationError: If sort is not a known project sort key
        """
        cursor = cursor or Cursor()
        if sort:
            cursor = cursor.with_sort(sort, PROJECT_SORTS)
        return fetch_all(self.client, "/projects", Project.from_dict, cursor)

    def get_by_id(self, project_id: str) -> Project:
        pid = validators.parse_id(project_id, "project_id")
        return self.client.get(url_path("projects", "id", pid), dest=Project.from_dict)

    def get_by_name(self, name: str) -> Project:
        if not name:
            raise ValidationError("project name is required")
        return self.client.get(url_path("projects", "name", name), dest=Project.from_dict)

    def create(self, project: Project) -> Project:
        """Create a project; the returned project carries the new id."""
        return self.client.post("/projects", Project(name=project.name), dest=Project.from_dict)

    def update(self, project: Project) -> None:
        """Replace a project's attributes.

        Raises:
            ValidationError: If the project id is missing or malformed
        """
        pid = validators.parse_id(project.id, "project_id")
        self.client.put(url_path("projects", "id", pid), Project(id=pid, name=project.name), dest=None)

    def delete(self, project_id: str) -> None:
        pid = validators.parse_id(project_id, "project_id")
        self.client.delete(url_path("projects", "id", pid))
