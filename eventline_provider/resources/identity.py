"""Identity resource.

Identity data is declared as a JSON document whose schema depends on the
connector. The record keeps the declared text; a read-back only replaces
it when the server's data differs structurally, so formatting or key
order never shows up as drift.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from eventline_provider.core.eventline import Identity, IdentityService, ValidationError
from eventline_provider.core.raw_data import RawData, json_equal
from eventline_provider.core.validators import parse_id, parse_import_key
from .base import Reconciler, ReconcileResult, ResourceState


@dataclass(frozen=True)
class IdentityRecord:
    project_id: str
    name: Optional[str] = None
    connector: Optional[str] = None
    type: Optional[str] = None
    data: Optional[str] = None
    id: Optional[str] = None
    status: Optional[str] = None
    error_message: Optional[str] = None

    def to_state(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "connector": self.connector,
            "type": self.type,
            "data": self.data,
            "status": self.status,
        }


def _status(identity: Identity) -> Optional[str]:
    return identity.status.value if identity.status else None


def merge_data(local: Optional[str], remote: RawData) -> str:
    """Keep the local data text unless the remote payload differs materially."""
    if local and json_equal(local, remote.encode()):
        return local
    return remote.text


class IdentityReconciler(Reconciler[IdentityRecord]):
    """Identities are scoped by project and imported as ``<project-id>/<identity-id>``."""

    kind = "identity"

    def _service(self, project_id: str) -> IdentityService:
        return IdentityService(self.client.for_project(project_id))

    def _validate(self, desired: IdentityRecord) -> None:
        parse_id(desired.project_id, "project_id")
        for field_name in ("name", "connector", "type", "data"):
            if not getattr(desired, field_name):
                raise ValidationError(f"identity {field_name} is required")
        RawData.from_text(desired.data).decode()

    def _to_identity(self, record: IdentityRecord, identity_id: Optional[str] = None) -> Identity:
        return Identity(
            id=identity_id,
            project_id=parse_id(record.project_id, "project_id"),
            name=record.name,
            connector=record.connector,
            type=record.type,
            data=RawData.from_text(record.data),
        )

    def _create(self, desired: IdentityRecord) -> IdentityRecord:
        self._validate(desired)
        service = self._service(desired.project_id)
        created = service.create(self._to_identity(desired))
        return replace(
            desired,
            id=created.id,
            status=_status(created),
            error_message=created.error_message,
        )

    def _read(self, record: IdentityRecord) -> IdentityRecord:
        service = self._service(record.project_id)
        identity = service.get_by_id(record.id)
        return replace(
            record,
            id=identity.id,
            name=identity.name,
            connector=identity.connector,
            type=identity.type,
            data=merge_data(record.data, identity.data),
            status=_status(identity),
            error_message=identity.error_message,
        )

    def _update(self, record: IdentityRecord) -> IdentityRecord:
        self._validate(record)
        iid = parse_id(record.id, "identity_id")
        service = self._service(record.project_id)
        updated = service.update(self._to_identity(record, iid))
        return replace(record, id=iid, status=_status(updated), error_message=updated.error_message)

    def _delete(self, record: IdentityRecord) -> None:
        self._service(record.project_id).delete(record.id)

    def import_state(self, key: str) -> ReconcileResult[IdentityRecord]:
        project_id, identity_id = parse_import_key(key)
        return ReconcileResult(ResourceState.CREATED, IdentityRecord(project_id=project_id, id=identity_id))
