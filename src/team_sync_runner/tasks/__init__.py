"""Deployable tasks.

Importing this package registers every built-in task on ``task_registry``.
"""

from .base import AssignmentTask, TaskRegistry, TaskReport, task_registry
from .team_profiles import DeclareTeamsColumnSecurityProfilesTask
from .team_roles import DeclareTeamsRolesTask

__all__ = [
    "AssignmentTask",
    "DeclareTeamsColumnSecurityProfilesTask",
    "DeclareTeamsRolesTask",
    "TaskRegistry",
    "TaskReport",
    "task_registry",
]
