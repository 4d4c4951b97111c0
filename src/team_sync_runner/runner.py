#!/usr/bin/env python3
"""Provide the command-line host for the team sync runner.

``run`` executes a master task configuration against a file-backed directory
snapshot, ``validate`` checks one configuration file against a schema, and
``tasks`` lists the registered task names.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from .constants import DEFAULT_ASSETS_FOLDER, DEFAULT_MASTER_CONFIG_FILE, HOST_LOG_LEVELS, TEAM_ASSIGNMENTS_SCHEMA
from .directory import FileDirectory
from .errors import TaskRunnerError
from .io_utils import read_text
from .logging_utils import configure_logging
from .orchestrator import TaskOrchestrator
from .tasks import task_registry
from .validation import SchemaValidator, load_schema, validate_file


def _run(args: argparse.Namespace) -> int:
    directory = FileDirectory(args.directory_file)
    orchestrator = TaskOrchestrator(directory, args.assets_dir, dry_run=args.dry_run)
    summary = orchestrator.run(args.master_config)
    sys.stdout.write(
        f"Executed {summary.executed} out of {summary.configured} configured task entries"
        f"{' (dry run)' if args.dry_run else ''}.\n"
    )
    return 0


def _validate(args: argparse.Namespace) -> int:
    if args.schema is not None:
        result = validate_file(args.config_file, args.schema)
    else:
        result = SchemaValidator().validate(read_text(args.config_file), load_schema(TEAM_ASSIGNMENTS_SCHEMA))
    if result.ok:
        sys.stdout.write(f"{args.config_file}: valid\n")
        return 0
    for issue in result.errors:
        sys.stderr.write(f"JSON validation error: {issue.describe()}\n")
    return 1


def _tasks(args: argparse.Namespace) -> int:
    for name in task_registry.list_tasks():
        sys.stdout.write(name + "\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Team sync runner - deploy declarative team role and profile assignments",
    )
    parser.add_argument(
        "--log-level",
        default="information",
        choices=sorted(set(HOST_LOG_LEVELS) | {"debug", "trace"}),
        help="Log severity threshold (default: information)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Execute the tasks listed in a master task configuration")
    run.add_argument(
        "--assets-dir",
        type=Path,
        default=Path(DEFAULT_ASSETS_FOLDER),
        help=f"Folder the master and task configs are resolved against (default: {DEFAULT_ASSETS_FOLDER})",
    )
    run.add_argument(
        "--master-config",
        default=DEFAULT_MASTER_CONFIG_FILE,
        help=f"Master task configuration file name (default: {DEFAULT_MASTER_CONFIG_FILE})",
    )
    run.add_argument(
        "--directory-file",
        type=Path,
        required=True,
        help="JSON/YAML directory snapshot to reconcile against",
    )
    run.add_argument("--dry-run", action="store_true", help="Plan every change but commit nothing")
    run.set_defaults(func=_run)

    validate = subparsers.add_parser("validate", help="Validate a configuration file against a JSON Schema")
    validate.add_argument("config_file", type=Path)
    validate.add_argument(
        "--schema",
        type=Path,
        default=None,
        help=f"Schema file (default: packaged {TEAM_ASSIGNMENTS_SCHEMA})",
    )
    validate.set_defaults(func=_validate)

    tasks = subparsers.add_parser("tasks", help="List registered task names")
    tasks.set_defaults(func=_tasks)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return int(handler(args) or 0)
    except (TaskRunnerError, OSError, ValueError) as exc:
        logger.error("Run aborted: {}", exc)
        sys.stderr.write(f"error: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
