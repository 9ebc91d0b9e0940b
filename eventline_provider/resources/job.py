"""Job resource.

Jobs are deployed by name with their complete spec: create and update both
submit the whole spec and the server replaces whatever it had.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from eventline_provider.core.eventline import JobService, JobSpec, ValidationError
from eventline_provider.core.validators import parse_id, parse_import_key
from .base import Reconciler, ReconcileResult, ResourceState


@dataclass(frozen=True)
class JobRecord:
    project_id: str
    spec: Optional[JobSpec] = None
    id: Optional[str] = None
    disabled: bool = False

    def to_state(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "disabled": self.disabled,
            "spec": self.spec.to_dict() if self.spec else None,
        }


class JobReconciler(Reconciler[JobRecord]):
    """Jobs are scoped by project and imported as ``<project-id>/<job-id>``."""

    kind = "job"

    def _service(self, project_id: str) -> JobService:
        return JobService(self.client.for_project(project_id))

    def _validate(self, desired: JobRecord) -> None:
        parse_id(desired.project_id, "project_id")
        if desired.spec is None or not desired.spec.name:
            raise ValidationError("job spec with a name is required")
        if not desired.spec.steps:
            raise ValidationError(f"job {desired.spec.name!r} must define at least one step")

    def plan(self, desired: JobRecord) -> ReconcileResult[JobRecord]:
        """Validate the spec locally, then server-side with a dry-run deployment."""
        result = super().plan(desired)
        with self._operation("plan", desired):
            self._service(desired.project_id).deploy(desired.spec, dry_run=True)
        return result

    def _create(self, desired: JobRecord) -> JobRecord:
        self._validate(desired)
        job = self._service(desired.project_id).deploy(desired.spec)
        return replace(desired, id=job.id, disabled=job.disabled)

    def _read(self, record: JobRecord) -> JobRecord:
        job = self._service(record.project_id).get_by_id(record.id)
        return replace(record, id=job.id, spec=job.spec, disabled=job.disabled)

    def _update(self, record: JobRecord) -> JobRecord:
        self._validate(record)
        service = self._service(record.project_id)
        current = service.get_by_id(record.id)
        if current.spec.name != record.spec.name:
            # Deploying under another name would create a second job.
            raise ValidationError(
                f"job {current.id} is named {current.spec.name!r}; renaming to "
                f"{record.spec.name!r} requires replacing the resource"
            )
        job = service.deploy(record.spec)
        return replace(record, id=job.id, disabled=job.disabled)

    def _delete(self, record: JobRecord) -> None:
        self._service(record.project_id).delete(record.id)

    def import_state(self, key: str) -> ReconcileResult[JobRecord]:
        project_id, job_id = parse_import_key(key)
        return ReconcileResult(ResourceState.CREATED, JobRecord(project_id=project_id, id=job_id))
