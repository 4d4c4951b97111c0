"""Directory snapshot persisted in a single JSON or YAML file.

Layout::

    {
      "entities": {"team": [{"id": "...", "name": "Sales"}], "role": [...]},
      "links": {"teamroles_association": {"<team id>": ["<role id>", ...]}}
    }

Commits rewrite the file atomically (write-tmp-then-rename) while holding an
exclusive lock on ``<file>.lock``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from filelock import FileLock
from loguru import logger

from ..errors import CommitError, ConfigParseError
from ..io_utils import atomic_write_document, load_document
from ..models import parse_uuid
from .base import Entity, LinkOperation
from .memory import InMemoryDirectory, InMemorySession

LOCK_TIMEOUT = 30  # seconds


class FileDirectory(InMemoryDirectory):
    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._lock = FileLock(str(self.path) + ".lock", timeout=LOCK_TIMEOUT)
        self.reload()

    def reload(self) -> None:
        self._entities = {}
        self._links = {}
        if not self.path.exists():
            logger.debug("Directory snapshot {} does not exist yet; starting empty", self.path)
            return
        data = load_document(self.path, kind="directory snapshot") or {}
        if not isinstance(data, dict):
            raise ConfigParseError(f"{self.path.name}: expected object, got {type(data).__name__}")
        self._load_dict(data)

    def _load_dict(self, data: dict[str, Any]) -> None:
        entities = data.get("entities") or {}
        for entity_type, records in entities.items():
            for i, record in enumerate(records or []):
                if not isinstance(record, dict):
                    raise ConfigParseError(f"entities.{entity_type}[{i}]: expected object")
                entity_id = parse_uuid(record.get("id"), f"entities.{entity_type}[{i}].id")
                self._put_entity(Entity(entity_type=entity_type, id=entity_id, name=str(record.get("name") or "")))
        links = data.get("links") or {}
        for relation, table in links.items():
            for principal_id, related_ids in (table or {}).items():
                principal = parse_uuid(principal_id, f"links.{relation}")
                bucket = self._links.setdefault(relation, {}).setdefault(principal, set())
                for related_id in related_ids or []:
                    bucket.add(parse_uuid(related_id, f"links.{relation}.{principal_id}"))

    def open_session(self) -> InMemorySession:
        with self._lock:
            self.reload()
        return InMemorySession(self)

    def apply(self, operations: list[LinkOperation]) -> None:
        with self._lock:
            # Apply onto the current on-disk snapshot
            self.reload()
            previous = self._links
            super().apply(operations)
            try:
                atomic_write_document(self.path, self.to_dict())
            except OSError as exc:
                self._links = previous
                self.commit_count -= 1
                raise CommitError(f"Failed to write directory snapshot {self.path}: {exc}") from exc
