"""Exceptions raised by the task runner.

Every fatal condition derives from :class:`TaskRunnerError`.  Per-item
resolution problems (a missing team, a missing role) are never raised; they
are logged as warnings and skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .validation import ValidationIssue


class TaskRunnerError(Exception):
    """Base class for fatal task runner errors."""

    pass


class ConfigNotFoundError(TaskRunnerError, FileNotFoundError):
    """A task configuration file does not exist."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class SchemaNotFoundError(ConfigNotFoundError):
    """A packaged schema resource is missing or unreadable."""

    pass


class ConfigParseError(TaskRunnerError, ValueError):
    """A configuration document could not be deserialized."""

    pass


class ConfigValidationError(TaskRunnerError):
    """A configuration document failed schema validation."""

    def __init__(self, message: str, issues: Sequence["ValidationIssue"] = ()) -> None:
        self.issues = list(issues)
        details = "; ".join(issue.describe() for issue in self.issues)
        super().__init__(f"{message}: {details}" if details else message)


class CommitError(TaskRunnerError):
    """The directory rejected a batch of link/unlink operations."""

    pass
