"""Declare which security roles each team holds."""

from __future__ import annotations

from ..constants import ENTITY_ROLE, SECURITY_ROLE_IDS_KEY, TEAM_ASSIGNMENTS_SCHEMA, TEAM_ROLES_RELATIONSHIP
from ..reconciler import RelationBinding
from .base import AssignmentTask, task_registry


@task_registry.register
class DeclareTeamsRolesTask(AssignmentTask):
    name = "DeclareTeamsRolesTask"
    schema_name = TEAM_ASSIGNMENTS_SCHEMA
    binding = RelationBinding(
        relation=TEAM_ROLES_RELATIONSHIP,
        related_entity_type=ENTITY_ROLE,
        config_key=SECURITY_ROLE_IDS_KEY,
        label="role",
    )
