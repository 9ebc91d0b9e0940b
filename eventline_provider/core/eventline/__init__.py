"""Eventline API client library.

This package provides a modular, testable interface to the Eventline HTTP API.

Architecture:
- client.py: HTTP client with authentication and project scoping
- pagination.py: Cursor pagination over collection endpoints
- models.py: API representations (projects, identities, jobs, executions, events)
- projects.py: Project operations
- identities.py: Identity operations (project-scoped)
- jobs.py: Job deployment and execution control (project-scoped)
- events.py: Event replay
- identity_data.py: Typed views over opaque identity data
- exceptions.py: Typed exceptions for error handling

Usage:
    from eventline_provider.core.eventline import EventlineClient, IdentityService

    client = EventlineClient("https://eventline.example.com/api", api_key="...")
    identities = IdentityService(client.for_project(project_id)).list()
"""
from .exceptions import (
    EventlineError,
    TransportError,
    EncodeError,
    DecodeError,
    ValidationError,
    APIError,
    NotFoundError,
    RequestFailedError,
)
from .client import (
    EventlineClient,
    REQUEST_TIMEOUT,
    PROJECT_ID_HEADER,
    RAW,
    JSON,
    url_path,
)
from .pagination import Cursor, Order, Page, fetch_all, DEFAULT_PAGE_SIZE
from .models import (
    Project,
    Identity,
    IdentityStatus,
    JobSpec,
    Job,
    Parameter,
    ParameterType,
    Runner,
    Trigger,
    Step,
    StepCommand,
    StepScript,
    JobExecution,
    JobExecutionInput,
    JobExecutionStatus,
    Event,
)
from .projects import ProjectService
from .identities import IdentityService
from .jobs import JobService
from .events import EventService

__all__ = [
    # Client
    "EventlineClient",
    "REQUEST_TIMEOUT",
    "PROJECT_ID_HEADER",
    "RAW",
    "JSON",
    "url_path",

    # Exceptions
    "EventlineError",
    "TransportError",
    "EncodeError",
    "DecodeError",
    "ValidationError",
    "APIError",
    "NotFoundError",
    "RequestFailedError",

    # Pagination
    "Cursor",
    "Order",
    "Page",
    "fetch_all",
    "DEFAULT_PAGE_SIZE",

    # Models
    "Project",
    "Identity",
    "IdentityStatus",
    "JobSpec",
    "Job",
    "Parameter",
    "ParameterType",
    "Runner",
    "Trigger",
    "Step",
    "StepCommand",
    "StepScript",
    "JobExecution",
    "JobExecutionInput",
    "JobExecutionStatus",
    "Event",

    # Services
    "ProjectService",
    "IdentityService",
    "JobService",
    "EventService",
]
