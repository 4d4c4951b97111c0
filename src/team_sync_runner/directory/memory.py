"""In-process directory used for dry runs, tests and as the file store base."""

from __future__ import annotations

import copy
import uuid
from typing import Any, Iterable, Mapping, Optional

from ..errors import CommitError
from .base import DirectoryClient, DirectorySession, Entity, LinkOperation

LinkTable = dict[str, dict[uuid.UUID, set[uuid.UUID]]]


class InMemoryDirectory(DirectoryClient):
    """Entities and links held in dictionaries.

    Parameters
    ----------
    entities:
        Initial entities.
    links:
        ``{relation: {principal_id: {related_id, ...}}}``.
    """

    def __init__(
        self,
        entities: Iterable[Entity] = (),
        links: Optional[Mapping[str, Mapping[uuid.UUID, Iterable[uuid.UUID]]]] = None,
    ) -> None:
        self._entities: dict[str, dict[uuid.UUID, Entity]] = {}
        self._links: LinkTable = {}
        self.commit_count = 0
        for entity in entities:
            self._put_entity(entity)
        for relation, table in (links or {}).items():
            for principal_id, related_ids in table.items():
                for related_id in related_ids:
                    self._links.setdefault(relation, {}).setdefault(principal_id, set()).add(related_id)

    # -- setup --------------------------------------------------------------

    def _put_entity(self, entity: Entity) -> Entity:
        self._entities.setdefault(entity.entity_type, {})[entity.id] = entity
        return entity

    def add_entity(self, entity_type: str, name: str, entity_id: Optional[uuid.UUID] = None) -> Entity:
        return self._put_entity(Entity(entity_type=entity_type, id=entity_id or uuid.uuid4(), name=name))

    def remove_entity(self, entity: Entity) -> None:
        self._entities.get(entity.entity_type, {}).pop(entity.id, None)

    def add_link(self, relation: str, principal: Entity, related: Entity) -> None:
        self._links.setdefault(relation, {}).setdefault(principal.id, set()).add(related.id)

    # -- queries ------------------------------------------------------------

    def get_entity(self, entity_type: str, entity_id: uuid.UUID) -> Optional[Entity]:
        return self._entities.get(entity_type, {}).get(entity_id)

    def find_by_name(self, entity_type: str, name: str) -> Optional[Entity]:
        for entity in self._entities.get(entity_type, {}).values():
            if entity.name == name:
                return entity
        return None

    def linked_ids(self, relation: str, principal_id: uuid.UUID) -> set[uuid.UUID]:
        return set(self._links.get(relation, {}).get(principal_id, set()))

    def entity_exists(self, entity_id: uuid.UUID) -> bool:
        return any(entity_id in table for table in self._entities.values())

    # -- sessions -----------------------------------------------------------

    def open_session(self) -> "InMemorySession":
        return InMemorySession(self)

    def apply(self, operations: list[LinkOperation]) -> None:
        """Apply *operations* as one unit; on any rejection nothing changes."""
        staged = copy.deepcopy(self._links)
        for op in operations:
            if not self.entity_exists(op.principal_id) or not self.entity_exists(op.related_id):
                raise CommitError(
                    f"Cannot {op.action} {op.related_id} on {op.principal_id} via '{op.relation}': entity does not exist"
                )
            related = staged.setdefault(op.relation, {}).setdefault(op.principal_id, set())
            if op.action == "link":
                related.add(op.related_id)
            else:
                related.discard(op.related_id)
        self._links = staged
        self.commit_count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities": {
                entity_type: [{"id": str(e.id), "name": e.name} for e in table.values()]
                for entity_type, table in self._entities.items()
            },
            "links": {
                relation: {
                    str(principal_id): sorted(str(r) for r in related)
                    for principal_id, related in table.items()
                    if related
                }
                for relation, table in self._links.items()
            },
        }


class InMemorySession(DirectorySession):
    def __init__(self, directory: InMemoryDirectory) -> None:
        self._directory = directory
        self._operations: list[LinkOperation] = []
        self._attached: set[tuple[str, uuid.UUID]] = set()
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise CommitError("Directory session is already closed")

    def find(self, entity_type, *, id=None, name=None):
        self._ensure_open()
        if id is not None:
            return self._directory.get_entity(entity_type, id)
        if name is not None:
            return self._directory.find_by_name(entity_type, name)
        return None

    def attach(self, entity: Entity) -> None:
        self._attached.add((entity.entity_type, entity.id))

    def is_attached(self, entity: Entity) -> bool:
        return (entity.entity_type, entity.id) in self._attached

    def load_related_ids(self, entity: Entity, relation: str) -> set[uuid.UUID]:
        self._ensure_open()
        related = self._directory.linked_ids(relation, entity.id)
        for op in self._operations:
            if op.relation != relation or op.principal_id != entity.id:
                continue
            if op.action == "link":
                related.add(op.related_id)
            else:
                related.discard(op.related_id)
        return related

    def link(self, principal: Entity, relation: str, related: Entity) -> None:
        self._ensure_open()
        self._operations.append(LinkOperation("link", relation, principal.id, related.id))

    def unlink(self, principal: Entity, relation: str, related: Entity) -> None:
        self._ensure_open()
        self._operations.append(LinkOperation("unlink", relation, principal.id, related.id))

    @property
    def pending_operations(self) -> list[LinkOperation]:
        return list(self._operations)

    @property
    def closed(self) -> bool:
        return self._closed

    def commit(self) -> None:
        self._ensure_open()
        self._directory.apply(self._operations)
        self._operations = []
        self._closed = True

    def discard(self) -> None:
        self._operations = []
        self._closed = True
