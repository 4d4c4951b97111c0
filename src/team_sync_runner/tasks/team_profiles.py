"""Declare which field (column) security profiles each team belongs to."""

from __future__ import annotations

from ..constants import (
    ENTITY_FIELD_SECURITY_PROFILE,
    FIELD_SECURITY_PROFILE_IDS_KEY,
    TEAM_ASSIGNMENTS_SCHEMA,
    TEAM_PROFILES_RELATIONSHIP,
)
from ..reconciler import RelationBinding
from .base import AssignmentTask, task_registry


@task_registry.register
class DeclareTeamsColumnSecurityProfilesTask(AssignmentTask):
    name = "DeclareTeamsColumnSecurityProfiles"
    schema_name = TEAM_ASSIGNMENTS_SCHEMA
    binding = RelationBinding(
        relation=TEAM_PROFILES_RELATIONSHIP,
        related_entity_type=ENTITY_FIELD_SECURITY_PROFILE,
        config_key=FIELD_SECURITY_PROFILE_IDS_KEY,
        label="field security profile",
    )
