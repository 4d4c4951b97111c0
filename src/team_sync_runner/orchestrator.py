"""Run the tasks listed in a master task configuration, in order.

The orchestrator skips disabled, incomplete and unregistered entries with a
log line, and stops the whole run on the first task that raises.  Later tasks
may depend on what earlier ones changed, so tasks never run concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from .constants import ENGINE_LOG_TAG
from .directory.base import DirectoryClient
from .io_utils import resolve_path
from .models import TaskEntry, load_master_config
from .tasks import TaskRegistry, TaskReport, task_registry
from .validation import SchemaValidator


@dataclass
class RunSummary:
    configured: int = 0
    executed: int = 0
    skipped: list[str] = field(default_factory=list)
    reports: list[TaskReport] = field(default_factory=list)


class TaskOrchestrator:
    """Resolves master config entries to registered tasks and runs them.

    Parameters
    ----------
    directory:
        Directory collaborator every task writes through.
    assets_dir:
        Root the master config and task config files are resolved against.
    """

    def __init__(
        self,
        directory: DirectoryClient,
        assets_dir: Path,
        *,
        registry: Optional[TaskRegistry] = None,
        validator: Optional[SchemaValidator] = None,
        schema_dir: Optional[Path] = None,
        dry_run: bool = False,
    ) -> None:
        if directory is None:
            raise ValueError("directory is required")
        if assets_dir is None:
            raise ValueError("assets_dir is required")
        self.directory = directory
        self.assets_dir = Path(assets_dir)
        self.registry = registry or task_registry
        self.validator = validator or SchemaValidator()
        self.schema_dir = schema_dir
        self.dry_run = dry_run
        self.log = logger.bind(task=ENGINE_LOG_TAG)

    def run(self, master_config: Optional[str | Path]) -> RunSummary:
        summary = RunSummary()
        if not master_config or not str(master_config).strip():
            self.log.warning("Master task configuration file name not provided. No tasks will be executed.")
            return summary

        master_path = resolve_path(self.assets_dir, master_config)
        self.log.info("Attempting to load master task configuration from: {}", master_path)
        if not master_path.is_file():
            self.log.warning("Master task configuration file '{}' not found. No tasks will be executed.", master_path)
            return summary

        try:
            config = load_master_config(master_path)
        except Exception as exc:
            self.log.error("Error reading or deserializing master task configuration file '{}': {}", master_path, exc)
            raise

        if not config.tasks:
            self.log.info("Master task configuration is empty or contains no tasks.")
            return summary

        summary.configured = len(config.tasks)
        self.log.info("Found {} task entries in master configuration.", summary.configured)

        for entry in config.tasks:
            if not self._runnable(entry):
                summary.skipped.append(entry.task_name)
                continue
            summary.reports.append(self._execute(entry))
            summary.executed += 1

        self.log.info(
            "Finished processing tasks. Executed {} out of {} configured task entries.",
            summary.executed, summary.configured,
        )
        return summary

    def _runnable(self, entry: TaskEntry) -> bool:
        if not entry.enabled:
            self.log.info("Task '{}' is disabled in master config. Skipping.", entry.task_name)
            return False
        if not entry.task_name.strip() or not entry.config_file.strip():
            self.log.warning(
                "Invalid task entry in master config - taskName or configFile is missing. Entry: {}",
                entry.to_dict(),
            )
            return False
        if not self.registry.has(entry.task_name):
            self.log.warning(
                "Task '{}' is specified in master config but no corresponding task type is registered. Skipping.",
                entry.task_name,
            )
            return False
        return True

    def _execute(self, entry: TaskEntry) -> TaskReport:
        task_cls = self.registry.get(entry.task_name)
        self.log.info("Preparing to execute task '{}' with config '{}'.", entry.task_name, entry.config_file)
        try:
            task = task_cls(
                self.directory,
                self.assets_dir,
                validator=self.validator,
                schema_dir=self.schema_dir,
                dry_run=self.dry_run,
            )
        except Exception as exc:
            self.log.error(
                "Failed to create an instance of task type '{}' for task '{}': {}",
                task_cls.__qualname__, entry.task_name, exc,
            )
            raise

        try:
            report = task.execute(entry.config_file)
        except Exception as exc:
            self.log.error("Task '{}' failed during execution: {}", entry.task_name, exc)
            raise
        self.log.info("Task '{}' executed successfully.", entry.task_name)
        return report


def run_tasks(
    directory: DirectoryClient,
    assets_dir: Path,
    master_config: Optional[str | Path],
    *,
    dry_run: bool = False,
) -> RunSummary:
    """Convenience wrapper used by hosts that do not need to customise the orchestrator."""
    return TaskOrchestrator(directory, assets_dir, dry_run=dry_run).run(master_config)
