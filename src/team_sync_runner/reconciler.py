"""Association reconciliation: converge a team's links onto a desired set.

For one principal and one relation the reconciler computes::

    to_add    = valid_desired - existing
    to_remove = existing - valid_desired

and records a link / unlink for each ID on the directory session.  Desired IDs
that do not resolve to an entity are dropped with a warning, so they never
reach ``to_add``.  Reconciling the same desired set a second time produces no
operations.

Lookup misses are warnings; anything raised by the directory itself
propagates to the caller.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Iterable, Optional

from loguru import logger

from .constants import ENTITY_TEAM
from .directory.base import DirectorySession, Entity

RelatedResolver = Callable[[DirectorySession, uuid.UUID], Optional[Entity]]


@dataclass(frozen=True)
class RelationBinding:
    """Ties a config relation set to a directory relationship."""
    relation: str                  # directory relationship name
    related_entity_type: str       # entity type on the far side of the link
    config_key: str                # relation set field in the assignment document
    label: str                     # human-readable name used in log lines
    principal_entity_type: str = ENTITY_TEAM


@dataclass(frozen=True)
class PrincipalRef:
    id: Optional[uuid.UUID] = None
    name: Optional[str] = None

    def __str__(self) -> str:
        return f"ID {self.id} or name {self.name}"


@dataclass
class ReconcileResult:
    principal_ref: PrincipalRef
    principal: Optional[Entity] = None
    skipped: bool = False
    dropped_ids: list[uuid.UUID] = field(default_factory=list)
    to_add: set[uuid.UUID] = field(default_factory=set)
    to_remove: set[uuid.UUID] = field(default_factory=set)
    linked: list[uuid.UUID] = field(default_factory=list)
    unlinked: list[uuid.UUID] = field(default_factory=list)

    @property
    def operation_count(self) -> int:
        return len(self.linked) + len(self.unlinked)


def diff_ids(
    desired: Iterable[uuid.UUID], existing: Iterable[uuid.UUID]
) -> tuple[set[uuid.UUID], set[uuid.UUID]]:
    """Return ``(to_add, to_remove)`` as plain set differences."""
    desired_set = set(desired)
    existing_set = set(existing)
    return desired_set - existing_set, existing_set - desired_set


def _ordered(ids: AbstractSet[uuid.UUID]) -> list[uuid.UUID]:
    return sorted(ids, key=str)


class AssociationReconciler:
    """Reconciles one relation for any number of principals in one session.

    ``resolve_related`` looks up the related entity for an ID; the default
    finds ``binding.related_entity_type`` by ID on the session.
    """

    def __init__(
        self,
        session: DirectorySession,
        binding: RelationBinding,
        resolve_related: Optional[RelatedResolver] = None,
        log=None,
    ) -> None:
        self.session = session
        self.binding = binding
        self._resolve_related = resolve_related or self._find_related
        self.log = log or logger

    def _find_related(self, session: DirectorySession, related_id: uuid.UUID) -> Optional[Entity]:
        return session.find(self.binding.related_entity_type, id=related_id)

    # -- lookups ------------------------------------------------------------

    def resolve_principal(self, ref: PrincipalRef) -> Optional[Entity]:
        if ref.id is not None:
            if ref.name:
                self.log.debug("Both ID {} and name '{}' given for team; the ID takes precedence.", ref.id, ref.name)
            return self.session.find(self.binding.principal_entity_type, id=ref.id)
        if ref.name:
            return self.session.find(self.binding.principal_entity_type, name=ref.name)
        return None

    def valid_desired_ids(self, principal: Entity, desired: Iterable[uuid.UUID]) -> tuple[set[uuid.UUID], list[uuid.UUID]]:
        """Split *desired* into IDs that resolve and IDs that were dropped."""
        valid: set[uuid.UUID] = set()
        dropped: list[uuid.UUID] = []
        for related_id in _ordered(set(desired)):
            if self._resolve_related(self.session, related_id) is not None:
                valid.add(related_id)
            else:
                dropped.append(related_id)
                self.log.warning(
                    "{} with ID {} does not exist. It will be ignored for team {}.",
                    self.binding.label.capitalize(), related_id, principal,
                )
        return valid, dropped

    def existing_ids(self, principal: Entity) -> set[uuid.UUID]:
        self.log.debug("Retrieving existing {}s for team {}.", self.binding.label, principal)
        if not self.session.is_attached(principal):
            self.session.attach(principal)
        existing = self.session.load_related_ids(principal, self.binding.relation)
        self.log.debug("Found {} existing {}s for team {}.", len(existing), self.binding.label, principal)
        return existing

    # -- reconcile ----------------------------------------------------------

    def reconcile(self, ref: PrincipalRef, desired: Iterable[uuid.UUID]) -> ReconcileResult:
        result = ReconcileResult(principal_ref=ref)

        principal = self.resolve_principal(ref)
        if principal is None:
            self.log.warning("Team with {} does not exist. Skipping assignment.", ref)
            result.skipped = True
            return result
        result.principal = principal
        self.log.info("Processing {} assignments for team: {}.", self.binding.label, principal)

        valid, result.dropped_ids = self.valid_desired_ids(principal, desired)
        existing = self.existing_ids(principal)
        result.to_add, result.to_remove = diff_ids(valid, existing)

        for related_id in _ordered(result.to_add):
            related = self._resolve_related(self.session, related_id)
            if related is None:
                self.log.warning(
                    "{} with ID {} not found for association with team {}. It might have been deleted.",
                    self.binding.label.capitalize(), related_id, principal,
                )
                continue
            self.session.link(principal, self.binding.relation, related)
            result.linked.append(related_id)
            self.log.info("Prepared to associate {} {} with team {}.", self.binding.label, related, principal)

        for related_id in _ordered(result.to_remove):
            related = self._resolve_related(self.session, related_id)
            if related is None:
                self.log.warning(
                    "{} with ID {} not found for disassociation from team {}. "
                    "It might have been already removed or deleted.",
                    self.binding.label.capitalize(), related_id, principal,
                )
                continue
            self.session.unlink(principal, self.binding.relation, related)
            result.unlinked.append(related_id)
            self.log.info("Prepared to disassociate {} {} from team {}.", self.binding.label, related, principal)

        if not result.operation_count:
            self.log.debug("No {} changes needed for team {}.", self.binding.label, principal)
        return result
