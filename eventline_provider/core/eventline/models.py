"""Eventline API representations.

Each model converts from the JSON decoded off the wire (``from_dict``) and
back to the JSON submitted in request bodies (``to_dict``). Identifiers are
validated on the way in. Opaque payloads stay ``RawData`` in both
directions and the client writes them out verbatim.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from eventline_provider.core import raw_data, validators
from .exceptions import DecodeError, ValidationError

_FRACTION_RE = re.compile(r"(\.\d+)")


def _require(data: Dict[str, Any], key: str, model: str) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(f"cannot decode {model}: expected a JSON object")
    try:
        return data[key]
    except KeyError:
        raise DecodeError(f"cannot decode {model}: missing field {key!r}") from None


def _optional_id(value: Optional[str], field_name: str) -> Optional[str]:
    return validators.parse_id(value, field_name) if value else None


def parse_time(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as sent by the API.

    The server may send nanosecond precision; the fraction is cut to
    microseconds.
    """
    if not value:
        return None
    normalized = _FRACTION_RE.sub(lambda m: "." + m.group(1)[1:7].ljust(6, "0"), value.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as e:
        raise DecodeError(f"cannot decode timestamp {value!r}: {e}") from e


def format_time(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _opaque(value: Any) -> raw_data.RawData:
    """Keep data already captured verbatim by the client, encode anything else."""
    if isinstance(value, raw_data.RawData):
        return value
    return raw_data.RawData.from_value(value)


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optional fields from a request body."""
    return {key: value for key, value in data.items() if value is not None}


# ─────────────────────────────────────────────────────────────────────────────
# Projects
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Project:
    name: str
    id: Optional[str] = None
    creation_time: Optional[datetime] = None
    update_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=validators.parse_id(_require(data, "id", "project"), "project.id"),
            name=_require(data, "name", "project"),
            creation_time=parse_time(data.get("creation_time")),
            update_time=parse_time(data.get("update_time")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"id": self.id, "name": self.name})


# ─────────────────────────────────────────────────────────────────────────────
# Identities
# ─────────────────────────────────────────────────────────────────────────────

class IdentityStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    ERROR = "error"


@dataclass
class Identity:
    """Credentials used by jobs and triggers.

    ``data`` is the connector-specific payload, kept opaque.
    """

    name: str
    connector: str
    type: str
    data: raw_data.RawData
    id: Optional[str] = None
    project_id: Optional[str] = None
    status: Optional[IdentityStatus] = None
    error_message: Optional[str] = None
    creation_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
    last_use_time: Optional[datetime] = None
    refresh_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        status = data.get("status") if isinstance(data, dict) else None
        return cls(
            id=validators.parse_id(_require(data, "id", "identity"), "identity.id"),
            project_id=_optional_id(data.get("project_id"), "identity.project_id"),
            name=_require(data, "name", "identity"),
            status=validators.parse_enum(IdentityStatus, status, "identity status") if status else None,
            error_message=data.get("error_message") or None,
            connector=_require(data, "connector", "identity"),
            type=_require(data, "type", "identity"),
            data=_opaque(data.get("data")),
            creation_time=parse_time(data.get("creation_time")),
            update_time=parse_time(data.get("update_time")),
            last_use_time=parse_time(data.get("last_use_time")),
            refresh_time=parse_time(data.get("refresh_time")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "connector": self.connector,
            "type": self.type,
            "data": self.data if self.data else None,
        })


# ─────────────────────────────────────────────────────────────────────────────
# Jobs
# ─────────────────────────────────────────────────────────────────────────────

class ParameterType(str, Enum):
    NUMBER = "number"
    INTEGER = "integer"
    STRING = "string"
    BOOLEAN = "boolean"


@dataclass
class Parameter:
    name: str
    type: ParameterType
    description: Optional[str] = None
    values: Optional[List[str]] = None
    default: Any = None
    environment: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Parameter":
        return cls(
            name=_require(data, "name", "parameter"),
            type=validators.parse_enum(ParameterType, _require(data, "type", "parameter"), "parameter type"),
            description=data.get("description"),
            values=data.get("values"),
            default=data.get("default"),
            environment=data.get("environment"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "values": self.values,
            "default": self.default,
            "environment": self.environment,
        })


@dataclass
class Runner:
    name: str
    identity: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Runner":
        return cls(
            name=_require(data, "name", "runner"),
            identity=data.get("identity"),
            parameters=data.get("parameters"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"name": self.name, "identity": self.identity, "parameters": self.parameters})


@dataclass
class Trigger:
    """Event subscription; ``event`` is formatted as ``<connector>/<event>``."""

    event: str
    identity: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        connector, _, name = self.event.partition("/")
        if not connector or not name or "/" in name:
            raise ValidationError(f"invalid trigger event {self.event!r} (expected <connector>/<event>)")

    @property
    def connector(self) -> str:
        return self.event.split("/", 1)[0]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trigger":
        return cls(
            event=_require(data, "event", "trigger"),
            identity=data.get("identity"),
            parameters=data.get("parameters"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"event": self.event, "identity": self.identity, "parameters": self.parameters})


@dataclass
class StepCommand:
    name: str
    arguments: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepCommand":
        return cls(name=_require(data, "name", "step command"), arguments=data.get("arguments") or [])

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"name": self.name, "arguments": self.arguments or None})


@dataclass
class StepScript:
    path: str
    content: Optional[str] = None
    arguments: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepScript":
        return cls(
            path=_require(data, "path", "step script"),
            content=data.get("content"),
            arguments=data.get("arguments") or [],
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"path": self.path, "content": self.content, "arguments": self.arguments or None})


@dataclass
class Step:
    """One step of a job; exactly one of code, command or script is set."""

    label: Optional[str] = None
    code: Optional[str] = None
    command: Optional[StepCommand] = None
    script: Optional[StepScript] = None

    def __post_init__(self):
        actions = [action for action in (self.code, self.command, self.script) if action is not None]
        if len(actions) != 1:
            raise ValidationError("a step must define exactly one of code, command or script")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        if not isinstance(data, dict):
            raise DecodeError("cannot decode step: expected a JSON object")
        command = data.get("command")
        script = data.get("script")
        return cls(
            label=data.get("label"),
            code=data.get("code"),
            command=StepCommand.from_dict(command) if command else None,
            script=StepScript.from_dict(script) if script else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "label": self.label,
            "code": self.code,
            "command": self.command.to_dict() if self.command else None,
            "script": self.script.to_dict() if self.script else None,
        })


@dataclass
class JobSpec:
    """Complete job definition. Deploying a spec replaces the previous one."""

    name: str
    steps: List[Step] = field(default_factory=list)
    description: Optional[str] = None
    concurrent: bool = False
    environment: Dict[str, str] = field(default_factory=dict)
    identities: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    retention: Optional[int] = None
    runner: Optional[Runner] = None
    trigger: Optional[Trigger] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobSpec":
        runner = data.get("runner") if isinstance(data, dict) else None
        trigger = data.get("trigger") if isinstance(data, dict) else None
        return cls(
            name=_require(data, "name", "job spec"),
            description=data.get("description"),
            concurrent=bool(data.get("concurrent", False)),
            environment=dict(data.get("environment") or {}),
            identities=list(data.get("identities") or []),
            parameters=[Parameter.from_dict(p) for p in data.get("parameters") or []],
            retention=data.get("retention"),
            runner=Runner.from_dict(runner) if runner else None,
            trigger=Trigger.from_dict(trigger) if trigger else None,
            steps=[Step.from_dict(s) for s in data.get("steps") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "description": self.description,
            "concurrent": self.concurrent or None,
            "environment": self.environment or None,
            "identities": self.identities or None,
            "parameters": [p.to_dict() for p in self.parameters] or None,
            "retention": self.retention,
            "runner": self.runner.to_dict() if self.runner else None,
            "trigger": self.trigger.to_dict() if self.trigger else None,
            "steps": [s.to_dict() for s in self.steps],
        })


@dataclass
class Job:
    id: str
    spec: JobSpec
    project_id: Optional[str] = None
    disabled: bool = False
    creation_time: Optional[datetime] = None
    update_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        return cls(
            id=validators.parse_id(_require(data, "id", "job"), "job.id"),
            project_id=_optional_id(data.get("project_id"), "job.project_id"),
            disabled=bool(data.get("disabled", False)),
            spec=JobSpec.from_dict(_require(data, "spec", "job")),
            creation_time=parse_time(data.get("creation_time")),
            update_time=parse_time(data.get("update_time")),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Job executions
# ─────────────────────────────────────────────────────────────────────────────

class JobExecutionStatus(str, Enum):
    CREATED = "created"
    STARTED = "started"
    ABORTED = "aborted"
    SUCCESSFUL = "successful"
    FAILED = "failed"


@dataclass
class JobExecutionInput:
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"parameters": self.parameters}


@dataclass
class JobExecution:
    id: str
    job_id: str
    status: JobExecutionStatus
    project_id: Optional[str] = None
    job_spec: Optional[JobSpec] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    failure_message: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    refresh_time: Optional[datetime] = None

    @property
    def finished(self) -> bool:
        return self.status in (
            JobExecutionStatus.ABORTED,
            JobExecutionStatus.SUCCESSFUL,
            JobExecutionStatus.FAILED,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobExecution":
        job_spec = data.get("job_spec") if isinstance(data, dict) else None
        return cls(
            id=validators.parse_id(_require(data, "id", "job execution"), "job_execution.id"),
            project_id=_optional_id(data.get("project_id"), "job_execution.project_id"),
            job_id=validators.parse_id(_require(data, "job_id", "job execution"), "job_execution.job_id"),
            job_spec=JobSpec.from_dict(job_spec) if job_spec else None,
            parameters=dict(data.get("parameters") or {}),
            status=validators.parse_enum(
                JobExecutionStatus, _require(data, "status", "job execution"), "job execution status"
            ),
            failure_message=data.get("failure_message") or None,
            scheduled_time=parse_time(data.get("scheduled_time")),
            start_time=parse_time(data.get("start_time")),
            end_time=parse_time(data.get("end_time")),
            refresh_time=parse_time(data.get("refresh_time")),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Events
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Event:
    id: str
    connector: str
    name: str
    data: raw_data.RawData
    project_id: Optional[str] = None
    job_id: Optional[str] = None
    creation_time: Optional[datetime] = None
    event_time: Optional[datetime] = None
    processed: bool = False
    original_event_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            id=validators.parse_id(_require(data, "id", "event"), "event.id"),
            project_id=_optional_id(data.get("project_id"), "event.project_id"),
            job_id=_optional_id(data.get("job_id"), "event.job_id"),
            connector=_require(data, "connector", "event"),
            name=_require(data, "name", "event"),
            data=_opaque(data.get("data")),
            creation_time=parse_time(data.get("creation_time")),
            event_time=parse_time(data.get("event_time")),
            processed=bool(data.get("processed", False)),
            original_event_id=_optional_id(data.get("original_event_id"), "event.original_event_id"),
        )
