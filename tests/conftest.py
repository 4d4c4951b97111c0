from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from team_sync_runner.constants import (
    ENTITY_FIELD_SECURITY_PROFILE,
    ENTITY_ROLE,
    ENTITY_TEAM,
    TEAM_PROFILES_RELATIONSHIP,
    TEAM_ROLES_RELATIONSHIP,
)
from team_sync_runner.directory import Entity, InMemoryDirectory


@pytest.fixture
def log_records():
    """Collect loguru records emitted while the test runs."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG", format="{message}")
    yield records
    logger.remove(handler_id)


@dataclass
class Org:
    directory: InMemoryDirectory
    sales: Entity
    support: Entity
    role_a: Entity
    role_b: Entity
    role_c: Entity
    profile_x: Entity
    profile_y: Entity

    def roles_of(self, team: Entity) -> set[uuid.UUID]:
        return self.directory.linked_ids(TEAM_ROLES_RELATIONSHIP, team.id)

    def profiles_of(self, team: Entity) -> set[uuid.UUID]:
        return self.directory.linked_ids(TEAM_PROFILES_RELATIONSHIP, team.id)


@pytest.fixture
def org() -> Org:
    """Two teams, three roles, two profiles. Sales holds roles B and C."""
    directory = InMemoryDirectory()
    sales = directory.add_entity(ENTITY_TEAM, "Sales")
    support = directory.add_entity(ENTITY_TEAM, "Support")
    role_a = directory.add_entity(ENTITY_ROLE, "Role A")
    role_b = directory.add_entity(ENTITY_ROLE, "Role B")
    role_c = directory.add_entity(ENTITY_ROLE, "Role C")
    profile_x = directory.add_entity(ENTITY_FIELD_SECURITY_PROFILE, "Profile X")
    profile_y = directory.add_entity(ENTITY_FIELD_SECURITY_PROFILE, "Profile Y")
    directory.add_link(TEAM_ROLES_RELATIONSHIP, sales, role_b)
    directory.add_link(TEAM_ROLES_RELATIONSHIP, sales, role_c)
    return Org(directory, sales, support, role_a, role_b, role_c, profile_x, profile_y)


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    d = tmp_path / "PkgAssets"
    d.mkdir()
    return d
