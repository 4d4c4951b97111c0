"""Abstract directory collaborator.

The directory owns teams, roles and field security profiles.  The runner only
looks entities up and links/unlinks them inside a :class:`DirectorySession`;
all operations recorded in a session are applied together on
:meth:`DirectorySession.commit`, or not at all.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Literal, Optional

LinkAction = Literal["link", "unlink"]


@dataclass(frozen=True)
class Entity:
    """A directory record referenced by the runner (team, role, profile)."""
    entity_type: str
    id: uuid.UUID
    name: str = ""

    def __str__(self) -> str:
        return f"'{self.name}' (ID: {self.id})"


@dataclass(frozen=True)
class LinkOperation:
    action: LinkAction
    relation: str
    principal_id: uuid.UUID
    related_id: uuid.UUID


class DirectorySession(ABC):
    """Unit of work against the directory.

    Sessions provide read-your-writes: :meth:`load_related_ids` reflects the
    links and unlinks already recorded in the same session.
    """

    @abstractmethod
    def find(
        self,
        entity_type: str,
        *,
        id: Optional[uuid.UUID] = None,
        name: Optional[str] = None,
    ) -> Optional[Entity]:
        raise NotImplementedError

    @abstractmethod
    def attach(self, entity: Entity) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_attached(self, entity: Entity) -> bool:
        raise NotImplementedError

    @abstractmethod
    def load_related_ids(self, entity: Entity, relation: str) -> set[uuid.UUID]:
        raise NotImplementedError

    @abstractmethod
    def link(self, principal: Entity, relation: str, related: Entity) -> None:
        raise NotImplementedError

    @abstractmethod
    def unlink(self, principal: Entity, relation: str, related: Entity) -> None:
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """Apply every recorded operation. Raises :class:`CommitError`."""
        raise NotImplementedError

    @abstractmethod
    def discard(self) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def pending_operations(self) -> list[LinkOperation]:
        raise NotImplementedError

    @property
    @abstractmethod
    def closed(self) -> bool:
        raise NotImplementedError


class DirectoryClient(ABC):
    @abstractmethod
    def open_session(self) -> DirectorySession:
        raise NotImplementedError


@contextmanager
def transaction(client: DirectoryClient) -> Iterator[DirectorySession]:
    """Open a session and make sure it is released.

    The caller commits explicitly.  A session left open when the block exits
    (normally or through an exception) is discarded.

    Usage::

        with transaction(directory) as session:
            session.link(team, "teamroles_association", role)
            session.commit()
    """
    session = client.open_session()
    try:
        yield session
    finally:
        if not session.closed:
            session.discard()
