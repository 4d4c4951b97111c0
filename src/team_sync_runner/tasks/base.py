"""Base class and registry for deployable assignment tasks.

Each task binds the generic reconciler to one directory relationship.  Task
classes register themselves on import via ``task_registry.register``; the
orchestrator looks them up by the ``taskName`` given in the master config.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Optional

from ..directory.base import DirectoryClient, transaction
from ..errors import ConfigValidationError
from ..io_utils import YAML_SUFFIXES, parse_document, read_text, resolve_path
from ..logging_utils import task_logger
from ..models import AssignmentDocument
from ..reconciler import AssociationReconciler, PrincipalRef, ReconcileResult, RelationBinding
from ..validation import SchemaValidator, ValidationIssue, load_schema


# ---------------------------------------------------------------------------
# Task report
# ---------------------------------------------------------------------------

@dataclass
class TaskReport:
    """Outcome of one task execution."""
    task_name: str
    config_path: Path
    results: list[ReconcileResult] = field(default_factory=list)
    committed: bool = False

    @property
    def linked(self) -> int:
        return sum(len(r.linked) for r in self.results)

    @property
    def unlinked(self) -> int:
        return sum(len(r.unlinked) for r in self.results)

    @property
    def skipped_entries(self) -> int:
        return sum(1 for r in self.results if r.skipped)


# ---------------------------------------------------------------------------
# Base task
# ---------------------------------------------------------------------------

class AssignmentTask:
    """Validates a team assignment file and reconciles one relation from it.

    Subclasses only set the class attributes below.
    """

    name: ClassVar[str]
    schema_name: ClassVar[str]
    binding: ClassVar[RelationBinding]

    def __init__(
        self,
        directory: DirectoryClient,
        assets_dir: Path,
        *,
        validator: Optional[SchemaValidator] = None,
        schema_dir: Optional[Path] = None,
        dry_run: bool = False,
    ) -> None:
        if directory is None:
            raise ValueError("directory is required")
        self.directory = directory
        self.assets_dir = Path(assets_dir)
        self.validator = validator or SchemaValidator()
        self.schema_dir = schema_dir
        self.dry_run = dry_run
        self.log = task_logger(self.name)

    def execute(self, config_file: str) -> TaskReport:
        if not config_file or not str(config_file).strip():
            raise ValueError("Config file name for task cannot be null or empty.")

        self.log.info("Starting. Task-specific config file (relative to assets): {}", config_file)
        config_path = resolve_path(self.assets_dir, config_file)
        self.log.debug("Full path to task-specific config file: {}", config_path)

        try:
            config_text = self._read_config(config_path)
            self.log.debug("Reading schema '{}'", self.schema_name)
            schema_text = load_schema(self.schema_name, self.schema_dir)
        except FileNotFoundError as exc:
            self.log.error("Error accessing task-specific configuration or schema file: {}", exc)
            raise

        document_data: Any = config_text
        if config_path.suffix.lower() in YAML_SUFFIXES:
            document_data = parse_document(config_text, suffix=config_path.suffix, source=config_path.name)

        result = self.validator.validate(document_data, schema_text, log=self.log)
        if not result.ok:
            message = (
                f"{self.name}: Task-specific configuration file '{config_path}' "
                f"failed schema validation against '{self.schema_name}'"
            )
            self.log.error(message)
            raise ConfigValidationError(message, result.errors)
        self.log.info("Task-specific configuration file validated successfully.")

        if isinstance(document_data, str):
            document_data = parse_document(config_text, source=config_path.name)
        return self.apply(AssignmentDocument.from_dict(document_data), config_path)

    def _read_config(self, config_path: Path) -> str:
        try:
            return read_text(config_path)
        except UnicodeDecodeError as exc:
            issue = ValidationIssue(message=f"Malformed JSON in document: {exc}")
            self.log.error("JSON configuration is not valid against the schema:")
            self.log.error("  - {}", issue.describe())
            message = f"{self.name}: Task-specific configuration file '{config_path}' is not valid UTF-8"
            self.log.error(message)
            raise ConfigValidationError(message, [issue]) from exc

    def apply(self, document: AssignmentDocument, config_path: Path) -> TaskReport:
        report = TaskReport(task_name=self.name, config_path=config_path)
        if not document.assignments:
            self.log.warning("No team assignments found in '{}' or configuration is empty.", config_path)
            return report

        with transaction(self.directory) as session:
            reconciler = AssociationReconciler(session, self.binding, log=self.log)
            for entry in document.assignments:
                ref = PrincipalRef(id=entry.team_id, name=entry.name)
                if not entry.declares(self.binding.config_key):
                    self.log.info("No {}s configured for team {}. Skipping.", self.binding.label, entry.label)
                    continue
                report.results.append(reconciler.reconcile(ref, entry.desired(self.binding.config_key)))

            if self.dry_run:
                self.log.info(
                    "Dry run: discarding {} planned operation(s) from '{}'.",
                    len(session.pending_operations), config_path,
                )
                session.discard()
                return report

            self.log.info("Attempting to save {} changes from '{}'...", self.binding.label, config_path)
            try:
                session.commit()
            except Exception as exc:
                self.log.error("Error saving {} changes from '{}': {}", self.binding.label, config_path, exc)
                raise
            report.committed = True
            self.log.info(
                "{} changes from '{}' saved successfully ({} linked, {} unlinked).",
                self.binding.label.capitalize(), config_path, report.linked, report.unlinked,
            )
        return report


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TaskRegistry:
    """Case-insensitive map of task name to task class."""

    def __init__(self) -> None:
        self._tasks: dict[str, type[AssignmentTask]] = {}

    def register(self, task_cls: type[AssignmentTask]) -> type[AssignmentTask]:
        """Register a task class. Can be used as a decorator."""
        key = task_cls.name.lower()
        if key in self._tasks and self._tasks[key] is not task_cls:
            raise ValueError(f"Task '{task_cls.name}' is already registered")
        self._tasks[key] = task_cls
        task_logger(task_cls.name).debug(
            "Registered task type '{}' -> {}.{}", task_cls.name, task_cls.__module__, task_cls.__qualname__
        )
        return task_cls

    def get(self, name: str) -> type[AssignmentTask]:
        key = (name or "").lower()
        if key not in self._tasks:
            available = ", ".join(self.list_tasks())
            raise KeyError(f"Unknown task '{name}' (registered: {available})")
        return self._tasks[key]

    def has(self, name: str) -> bool:
        return (name or "").lower() in self._tasks

    def list_tasks(self) -> list[str]:
        return sorted(cls.name for cls in self._tasks.values())


# Singleton registry; tasks register here on import
task_registry = TaskRegistry()
