"""Project resource."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from eventline_provider.core.eventline import Project, ProjectService, ValidationError
from eventline_provider.core.validators import parse_id
from .base import Reconciler, ReconcileResult, ResourceState


@dataclass(frozen=True)
class ProjectRecord:
    name: Optional[str] = None
    id: Optional[str] = None

    def to_state(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


class ProjectReconciler(Reconciler[ProjectRecord]):
    """Projects are top-level: no scope, imported by bare id."""

    kind = "project"

    def _service(self) -> ProjectService:
        return ProjectService(self.client)

    def _validate(self, desired: ProjectRecord) -> None:
        if not desired.name:
            raise ValidationError("project name is required")

    def _create(self, desired: ProjectRecord) -> ProjectRecord:
        self._validate(desired)
        project = self._service().create(Project(name=desired.name))
        return ProjectRecord(id=project.id, name=project.name)

    def _read(self, record: ProjectRecord) -> ProjectRecord:
        project = self._service().get_by_id(record.id)
        return ProjectRecord(id=project.id, name=project.name)

    def _update(self, record: ProjectRecord) -> ProjectRecord:
        self._validate(record)
        pid = parse_id(record.id, "project_id")
        self._service().update(Project(id=pid, name=record.name))
        return replace(record, id=pid)

    def _delete(self, record: ProjectRecord) -> None:
        self._service().delete(record.id)

    def import_state(self, key: str) -> ReconcileResult[ProjectRecord]:
        """Seed a record from a bare project id."""
        if not key or "/" in key:
            raise ValidationError(f"unexpected import identifier format: expected <project-id>, got {key!r}")
        return ReconcileResult(ResourceState.CREATED, ProjectRecord(id=key))
