"""Read-only lookups exposed to the declarative tool.

Unlike reconcilers, data sources never absorb errors: a missing project
looked up by name is a configuration error.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from eventline_provider.core.eventline import (
    Cursor,
    EventlineClient,
    EventlineError,
    IdentityService,
    JobService,
    ProjectService,
)
from .identity import IdentityRecord
from .job import JobRecord
from .project import ProjectRecord

logger = logging.getLogger(__name__)


def _annotate(error: EventlineError, operation: str, resource: str, project_id: Optional[str] = None) -> None:
    logger.warning(
        "%s failed: %s", operation, error,
        extra={"operation": operation, "resource": resource, "project_id": project_id},
    )
    error.with_context(operation, resource)


def list_projects(client: EventlineClient, cursor: Optional[Cursor] = None) -> List[ProjectRecord]:
    try:
        projects = ProjectService(client).list(cursor)
    except EventlineError as e:
        _annotate(e, "FetchProjects", "projects")
        raise
    return [ProjectRecord(id=project.id, name=project.name) for project in projects]


def project_by_name(client: EventlineClient, name: str) -> ProjectRecord:
    try:
        project = ProjectService(client).get_by_name(name)
    except EventlineError as e:
        _annotate(e, "FetchProjectByName", "project")
        raise
    return ProjectRecord(id=project.id, name=project.name)


def list_identities(
    client: EventlineClient, project_id: str, cursor: Optional[Cursor] = None
) -> List[IdentityRecord]:
    """Return every identity of a project, data included as received."""
    try:
        identities = IdentityService(client.for_project(project_id)).list(cursor)
    except EventlineError as e:
        _annotate(e, "FetchIdentities", "identities", project_id)
        raise
    return [
        IdentityRecord(
            id=identity.id,
            project_id=identity.project_id or project_id,
            name=identity.name,
            connector=identity.connector,
            type=identity.type,
            data=identity.data.text,
            status=identity.status.value if identity.status else None,
            error_message=identity.error_message,
        )
        for identity in identities
    ]


def list_jobs(client: EventlineClient, project_id: str, cursor: Optional[Cursor] = None) -> List[JobRecord]:
    try:
        jobs = JobService(client.for_project(project_id)).list(cursor)
    except EventlineError as e:
        _annotate(e, "FetchJobs", "jobs", project_id)
        raise
    return [
        JobRecord(id=job.id, project_id=job.project_id or project_id, spec=job.spec, disabled=job.disabled)
        for job in jobs
    ]
