"""Eventline job and job execution operations."""
from __future__ import annotations

import logging
from typing import List, Optional

from eventline_provider.core import validators
from .client import EventlineClient, url_path
from .exceptions import ValidationError
from .models import Job, JobExecution, JobExecutionInput, JobSpec
from .pagination import Cursor, fetch_all

logger = logging.getLogger(__name__)

JOB_SORTS = ["id", "name"]


def _deploy_query(dry_run: bool) -> dict:
    return {"dry-run": ""} if dry_run else {}


class JobService:
    """Service for managing Eventline jobs and their executions.

    Jobs are deployed by name: deploying a spec creates the job when no job
    of that name exists and replaces its whole spec otherwise.
    """

    def __init__(self, client: EventlineClient):
        """Initialize job service.

        Args:
            client: Eventline client bound to a project

        Raises:
            ValidationError: If the client is not bound to a project
        """
        if client.project_id is None:
            raise ValidationError("job operations require a project-scoped client")
        self.client = client

    def list(self, cursor: Optional[Cursor] = None, sort: Optional[str] = None) -> List[Job]:
        cursor = cursor or Cursor()
        if sort:
            cursor = cursor.with_sort(sort, JOB_SORTS)
        return fetch_all(self.client, "/jobs", Job.from_dict, cursor)

    def get_by_id(self, job_id: str) -> Job:
        jid = validators.parse_id(job_id, "job_id")
        return self.client.get(url_path("jobs", "id", jid), dest=Job.from_dict)

    def get_by_name(self, name: str) -> Job:
        if not name:
            raise ValidationError("job name is required")
        return self.client.get(url_path("jobs", "name", name), dest=Job.from_dict)

    def deploy(self, spec: JobSpec, dry_run: bool = False) -> Optional[Job]:
        """Create or replace the job named by the spec.

        Args:
            spec: Complete job specification
            dry_run: Only validate the spec server-side

        Returns:
            The deployed job, or None for a dry run
        """
        path = url_path("jobs", "name", spec.name)
        query = _deploy_query(dry_run)
        if dry_run:
            self.client.put(path, spec, dest=None, query=query)
            logger.debug("Job spec %r validated (dry run)", spec.name)
            return None
        return self.client.put(path, spec, dest=Job.from_dict, query=query)

    def deploy_many(self, specs: List[JobSpec], dry_run: bool = False) -> Optional[List[Job]]:
        """Deploy several specs in one request.

        Returns:
            The deployed jobs in request order, or None for a dry run
        """
        query = _deploy_query(dry_run)
        if dry_run:
            self.client.put("/jobs", list(specs), dest=None, query=query)
            return None
        return self.client.put(
            "/jobs", list(specs), query=query,
            dest=lambda values: [Job.from_dict(value) for value in values or []],
        )

    def delete(self, job_id: str) -> None:
        jid = validators.parse_id(job_id, "job_id")
        self.client.delete(url_path("jobs", "id", jid))

    def execute(self, job_id: str, execution_input: Optional[JobExecutionInput] = None) -> JobExecution:
        """Start an execution of a job.

        Args:
            job_id: Job identifier
            execution_input: Parameter values (default: none)
        """
        jid = validators.parse_id(job_id, "job_id")
        return self.client.post(
            url_path("jobs", "id", jid, "execute"),
            execution_input or JobExecutionInput(),
            dest=JobExecution.from_dict,
        )

    def get_execution(self, execution_id: str) -> JobExecution:
        eid = validators.parse_id(execution_id, "job_execution_id")
        return self.client.get(url_path("job_executions", "id", eid), dest=JobExecution.from_dict)

    def abort_execution(self, execution_id: str) -> None:
        eid = validators.parse_id(execution_id, "job_execution_id")
        self.client.post(url_path("job_executions", "id", eid, "abort"), dest=None)

    def restart_execution(self, execution_id: str) -> None:
        eid = validators.parse_id(execution_id, "job_execution_id")
        self.client.post(url_path("job_executions", "id", eid, "restart"), dest=None)
