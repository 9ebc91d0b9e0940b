"""Reconciliation lifecycle shared by every managed resource kind.

A reconciler maps one declared record onto remote lifecycle calls:

    plan ──> create ──> read / update ──> delete
                          │
                          └──> REMOVED when the service reports the
                               resource as unknown

Records are immutable; every operation returns a ``ReconcileResult``
holding the new state and the record to persist (none once removed).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Iterator, Optional, TypeVar

from eventline_provider.core.eventline import EventlineClient, EventlineError, NotFoundError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ResourceState(str, Enum):
    UNKNOWN = "unknown"
    PLANNED = "planned"
    CREATED = "created"
    SYNCED = "synced"
    REMOVED = "removed"


@dataclass(frozen=True)
class ReconcileResult(Generic[R]):
    state: ResourceState
    record: Optional[R] = None

    @property
    def removed(self) -> bool:
        return self.state is ResourceState.REMOVED


class Reconciler(Generic[R]):
    """Base class for resource reconcilers.

    Subclasses set ``kind`` and implement ``_create``, ``_read``,
    ``_update``, ``_delete`` and ``import_state``. The public methods add
    the lifecycle policy:

    - errors propagate unchanged, annotated with operation and kind
    - read and delete absorb ``unknown_<kind>`` errors (and only those)
    - no retries; a failed call commits nothing
    """

    kind: str = ""

    def __init__(self, client: EventlineClient):
        """Initialize reconciler.

        Args:
            client: Unscoped Eventline client; scoped kinds derive a
                project-bound client per operation
        """
        self.client = client

    @contextmanager
    def _operation(self, operation: str, record: Any = None) -> Iterator[None]:
        try:
            yield
        except EventlineError as e:
            logger.warning("%s %s failed: %s", operation, self.kind, e, extra=self._extra(operation, record))
            e.with_context(operation, self.kind)
            raise

    def _absent(self, error: NotFoundError) -> bool:
        return error.kind == self.kind

    def _extra(self, operation: str, record: Any, **fields: Any) -> Dict[str, Any]:
        """Log context for an operation on ``record`` (project_id for scoped kinds)."""
        return {
            "operation": operation,
            "resource": self.kind,
            "resource_id": getattr(record, "id", None),
            "project_id": getattr(record, "project_id", None),
            **fields,
        }

    def _log_transition(self, operation: str, state: ResourceState, record: Any) -> None:
        logger.info(
            "%s %s %s -> %s", operation, self.kind, getattr(record, "id", None) or "", state.value,
            extra=self._extra(operation, record, state=state.value),
        )

    def plan(self, desired: R) -> ReconcileResult[R]:
        """Validate a desired record without contacting the service."""
        with self._operation("plan", desired):
            self._validate(desired)
        return ReconcileResult(ResourceState.PLANNED, desired)

    def create(self, desired: R) -> ReconcileResult[R]:
        """Create the remote resource and adopt the server-assigned fields."""
        with self._operation("create", desired):
            record = self._create(desired)
        self._log_transition("create", ResourceState.CREATED, record)
        return ReconcileResult(ResourceState.CREATED, record)

    def read(self, record: R) -> ReconcileResult[R]:
        """Refresh a record from the service.

        Returns:
            SYNCED with the refreshed record, or REMOVED when the resource
            no longer exists
        """
        with self._operation("read", record):
            try:
                fresh = self._read(record)
            except NotFoundError as e:
                if not self._absent(e):
                    raise
                self._log_transition("read", ResourceState.REMOVED, record)
                return ReconcileResult(ResourceState.REMOVED)
        return ReconcileResult(ResourceState.SYNCED, fresh)

    def update(self, record: R) -> ReconcileResult[R]:
        """Replace the remote resource with the whole desired record."""
        with self._operation("update", record):
            updated = self._update(record)
        self._log_transition("update", ResourceState.SYNCED, updated)
        return ReconcileResult(ResourceState.SYNCED, updated)

    def delete(self, record: R) -> ReconcileResult[R]:
        """Delete the remote resource; an already absent resource is a success."""
        with self._operation("delete", record):
            try:
                self._delete(record)
            except NotFoundError as e:
                if not self._absent(e):
                    raise
                logger.info(
                    "%s %s already absent", self.kind, getattr(record, "id", ""),
                    extra=self._extra("delete", record),
                )
        self._log_transition("delete", ResourceState.REMOVED, record)
        return ReconcileResult(ResourceState.REMOVED)

    def import_state(self, key: str) -> ReconcileResult[R]:
        raise NotImplementedError

    def _validate(self, desired: R) -> None:
        pass

    def _create(self, desired: R) -> R:
        raise NotImplementedError

    def _read(self, record: R) -> R:
        raise NotImplementedError

    def _update(self, record: R) -> R:
        raise NotImplementedError

    def _delete(self, record: R) -> None:
        raise NotImplementedError
