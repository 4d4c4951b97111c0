"""Typed configuration documents: the master task list and team assignments.

Both documents are read fresh on every run.  Field names are matched
case-insensitively and unknown fields are ignored, so ``TaskName``,
``taskName`` and ``taskname`` all populate :attr:`TaskEntry.task_name`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import RELATION_SET_KEYS
from .errors import ConfigParseError
from .io_utils import load_document


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _casefold_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    folded: dict[str, Any] = {}
    for key, value in data.items():
        folded.setdefault(str(key).lower(), value)
    return folded


def _as_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigParseError(f"{what}: expected object, got {type(data).__name__}")
    return _casefold_keys(data)


def _as_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigParseError(f"{what}: expected array, got {type(value).__name__}")
    return value


def _optional_str(value: Any, what: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigParseError(f"{what}: expected string, got {type(value).__name__}")
    return value


def parse_uuid(value: Any, what: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as exc:
        raise ConfigParseError(f"{what}: '{value}' is not a valid GUID") from exc


# ---------------------------------------------------------------------------
# Master task configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskEntry:
    """One entry of the master task list."""
    task_name: str = ""
    config_file: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "TaskEntry":
        what = f"tasks[{index}]"
        obj = _as_object(data, what)
        enabled = obj.get("enabled", True)
        if enabled is None:
            enabled = True
        if not isinstance(enabled, bool):
            raise ConfigParseError(f"{what}.enabled: expected boolean, got {type(enabled).__name__}")
        return cls(
            task_name=_optional_str(obj.get("taskname"), f"{what}.taskName") or "",
            config_file=_optional_str(obj.get("configfile"), f"{what}.configFile") or "",
            enabled=enabled,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"taskName": self.task_name, "configFile": self.config_file, "enabled": self.enabled}


@dataclass(frozen=True)
class MasterTaskConfig:
    tasks: tuple[TaskEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "MasterTaskConfig":
        if data is None:
            return cls()
        obj = _as_object(data, "master task configuration")
        raw_tasks = _as_list(obj.get("tasks"), "tasks")
        return cls(tasks=tuple(TaskEntry.from_dict(item, i) for i, item in enumerate(raw_tasks)))


# ---------------------------------------------------------------------------
# Team assignments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssignmentEntry:
    """Desired relation sets for one team.

    ``relations`` only holds the sets the entry declares.  An absent or
    ``null`` field is left out; an empty list is kept as an empty set.
    """
    team_id: Optional[uuid.UUID] = None
    name: Optional[str] = None
    relations: Mapping[str, frozenset[uuid.UUID]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "AssignmentEntry":
        what = f"teamAssignments[{index}]"
        obj = _as_object(data, what)

        raw_id = obj.get("teamid")
        team_id = parse_uuid(raw_id, f"{what}.teamId") if raw_id not in (None, "") else None

        relations: dict[str, frozenset[uuid.UUID]] = {}
        for key in RELATION_SET_KEYS:
            raw = obj.get(key.lower())
            if raw is None:
                continue
            items = _as_list(raw, f"{what}.{key}")
            relations[key] = frozenset(parse_uuid(item, f"{what}.{key}") for item in items)

        return cls(team_id=team_id, name=_optional_str(obj.get("name"), f"{what}.name"), relations=relations)

    def declares(self, key: str) -> bool:
        return key in self.relations

    def desired(self, key: str) -> frozenset[uuid.UUID]:
        return self.relations.get(key, frozenset())

    @property
    def label(self) -> str:
        if self.team_id and self.name:
            return f"{self.name} ({self.team_id})"
        return str(self.team_id or self.name or "<unidentified>")


@dataclass(frozen=True)
class AssignmentDocument:
    assignments: tuple[AssignmentEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "AssignmentDocument":
        if data is None:
            return cls()
        obj = _as_object(data, "team assignments configuration")
        raw = _as_list(obj.get("teamassignments"), "teamAssignments")
        return cls(assignments=tuple(AssignmentEntry.from_dict(item, i) for i, item in enumerate(raw)))


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

def load_master_config(path: Path) -> MasterTaskConfig:
    return MasterTaskConfig.from_dict(load_document(path, kind="master task configuration"))


def load_assignment_document(path: Path) -> AssignmentDocument:
    return AssignmentDocument.from_dict(load_document(path))
