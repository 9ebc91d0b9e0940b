"""Reconcilers and data sources for Eventline resources."""
from .base import ReconcileResult, Reconciler, ResourceState
from .project import ProjectReconciler, ProjectRecord
from .identity import IdentityReconciler, IdentityRecord
from .job import JobReconciler, JobRecord
from .data_sources import list_identities, list_jobs, list_projects, project_by_name

RECONCILERS = {
    ProjectReconciler.kind: ProjectReconciler,
    IdentityReconciler.kind: IdentityReconciler,
    JobReconciler.kind: JobReconciler,
}

__all__ = [
    "ReconcileResult",
    "Reconciler",
    "ResourceState",
    "ProjectReconciler",
    "ProjectRecord",
    "IdentityReconciler",
    "IdentityRecord",
    "JobReconciler",
    "JobRecord",
    "RECONCILERS",
    "list_identities",
    "list_jobs",
    "list_projects",
    "project_by_name",
]
