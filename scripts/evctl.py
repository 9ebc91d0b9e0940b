"""Operator CLI for an Eventline instance.

This module serves as a CLI wrapper around eventline_provider services:
listing resources, deploying job specs and controlling executions. Every
command prints JSON on stdout.
"""
from __future__ import annotations
import argparse
import dataclasses
import json
import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from eventline_provider.config import build_client, configure_logging, load_settings
from eventline_provider.core.eventline import (
    EventlineError,
    EventService,
    JobExecutionInput,
    JobService,
    JobSpec,
)
from eventline_provider.core.raw_data import RawData
from eventline_provider.resources import list_identities, list_jobs, list_projects

logger = logging.getLogger("eventline_provider.evctl")


def _jsonable(value):
    if hasattr(value, "to_state"):
        return _jsonable(value.to_state())
    if hasattr(value, "to_dict"):
        return _jsonable(value.to_dict())
    if isinstance(value, RawData):
        return value.decode() if value else None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value):
        return {f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    return value


def _print(value) -> None:
    print(json.dumps(_jsonable(value), indent=2, sort_keys=True))


def _parse_params(pairs):
    """Turn ``key=value`` arguments into execution parameters.

    Values are read as JSON when possible so numbers and booleans keep
    their type; anything else is passed as a string.
    """
    params = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"invalid parameter {pair!r}, expected key=value")
        try:
            params[key] = json.loads(raw)
        except ValueError:
            params[key] = raw
    return params


def _load_specs(path: str):
    data = json.loads(Path(path).read_text())
    if isinstance(data, list):
        return [JobSpec.from_dict(item) for item in data]
    return [JobSpec.from_dict(data)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Eventline operator helper")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("projects", help="List projects")

    si = sub.add_parser("identities", help="List identities of a project")
    si.add_argument("--project", required=True)

    sj = sub.add_parser("jobs", help="List jobs of a project")
    sj.add_argument("--project", required=True)

    sd = sub.add_parser("deploy", help="Deploy job specs from a JSON file")
    sd.add_argument("--project", required=True)
    sd.add_argument("--dry-run", action="store_true")
    sd.add_argument("file")

    se = sub.add_parser("execute", help="Execute a job")
    se.add_argument("--project", required=True)
    se.add_argument("--param", action="append", default=[], metavar="KEY=VALUE")
    se.add_argument("job_id")

    for name in ("abort", "restart"):
        sx = sub.add_parser(name, help=f"{name.capitalize()} a job execution")
        sx.add_argument("--project", required=True)
        sx.add_argument("execution_id")

    sr = sub.add_parser("replay", help="Replay an event")
    sr.add_argument("--project", required=True)
    sr.add_argument("event_id")

    return parser


def run(args, client, cursor=None) -> None:
    """Dispatch one subcommand; listings request pages shaped by ``cursor``."""
    if args.cmd == "projects":
        _print(list_projects(client, cursor))
    elif args.cmd == "identities":
        _print(list_identities(client, args.project, cursor))
    elif args.cmd == "jobs":
        _print(list_jobs(client, args.project, cursor))
    elif args.cmd == "deploy":
        specs = _load_specs(args.file)
        service = JobService(client.for_project(args.project))
        if len(specs) == 1:
            job = service.deploy(specs[0], dry_run=args.dry_run)
            _print(job if job is not None else {"valid": True})
        else:
            jobs = service.deploy_many(specs, dry_run=args.dry_run)
            _print(jobs if jobs is not None else {"valid": True})
    elif args.cmd == "execute":
        service = JobService(client.for_project(args.project))
        _print(service.execute(args.job_id, JobExecutionInput(parameters=_parse_params(args.param))))
    elif args.cmd == "abort":
        JobService(client.for_project(args.project)).abort_execution(args.execution_id)
        _print({"aborted": args.execution_id})
    elif args.cmd == "restart":
        JobService(client.for_project(args.project)).restart_execution(args.execution_id)
        _print({"restarted": args.execution_id})
    elif args.cmd == "replay":
        _print(EventService(client.for_project(args.project)).replay(args.event_id))


def main() -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    try:
        settings = load_settings()
    except RuntimeError as e:
        parser.error(str(e))

    configure_logging(settings.log_level, settings.log_json)

    try:
        with build_client(settings) as client:
            run(args, client, settings.default_cursor())
    except (EventlineError, ValueError, OSError) as e:
        logger.debug("%s failed", args.cmd, exc_info=True)
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
