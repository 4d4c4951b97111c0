"""Tests for the task orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar

import pytest

from team_sync_runner import TaskOrchestrator, run_tasks
from team_sync_runner.errors import ConfigNotFoundError, ConfigParseError
from team_sync_runner.tasks import AssignmentTask, TaskRegistry, TaskReport

from conftest import write_json


class RecordingTask(AssignmentTask):
    """Records each execution instead of touching the directory."""

    name = "RecordingTask"
    calls: ClassVar[list[str]] = []

    def execute(self, config_file: str) -> TaskReport:
        RecordingTask.calls.append(config_file)
        return TaskReport(task_name=self.name, config_path=self.assets_dir / config_file)


class ExplodingTask(AssignmentTask):
    name = "ExplodingTask"

    def execute(self, config_file: str) -> TaskReport:
        raise RuntimeError(f"cannot process {config_file}")


class UnconstructibleTask(AssignmentTask):
    name = "UnconstructibleTask"

    def __init__(self, *args, **kwargs) -> None:
        raise TypeError("bad constructor")


@pytest.fixture
def registry() -> TaskRegistry:
    RecordingTask.calls = []
    reg = TaskRegistry()
    reg.register(RecordingTask)
    reg.register(ExplodingTask)
    reg.register(UnconstructibleTask)
    return reg


@pytest.fixture
def orchestrator(org, assets_dir: Path, registry: TaskRegistry) -> TaskOrchestrator:
    return TaskOrchestrator(org.directory, assets_dir, registry=registry)


def _master(assets_dir: Path, tasks: list[dict]) -> str:
    write_json(assets_dir / "pdx_tasks.json", {"tasks": tasks})
    return "pdx_tasks.json"


class TestOrchestratorPreconditions:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_name_is_a_no_op(self, orchestrator: TaskOrchestrator, value) -> None:
        summary = orchestrator.run(value)
        assert summary.configured == 0
        assert summary.executed == 0

    def test_missing_file_is_a_no_op(self, orchestrator: TaskOrchestrator, log_records) -> None:
        summary = orchestrator.run("absent.json")
        assert summary.executed == 0
        assert any(r["level"].name == "WARNING" and "not found" in r["message"] for r in log_records)

    def test_malformed_master_config_is_fatal(self, orchestrator: TaskOrchestrator, assets_dir: Path) -> None:
        (assets_dir / "pdx_tasks.json").write_text("{ nope")
        with pytest.raises(ConfigParseError):
            orchestrator.run("pdx_tasks.json")

    def test_empty_task_list(self, orchestrator: TaskOrchestrator, assets_dir: Path) -> None:
        summary = orchestrator.run(_master(assets_dir, []))
        assert summary.configured == 0

    def test_requires_directory(self, assets_dir: Path) -> None:
        with pytest.raises(ValueError):
            TaskOrchestrator(None, assets_dir)


class TestOrchestratorRun:
    def test_runs_entries_in_order(self, orchestrator: TaskOrchestrator, assets_dir: Path) -> None:
        master = _master(
            assets_dir,
            [
                {"taskName": "RecordingTask", "configFile": "first.json"},
                {"taskName": "recordingtask", "configFile": "second.json"},
            ],
        )
        summary = orchestrator.run(master)
        assert RecordingTask.calls == ["first.json", "second.json"]
        assert summary.executed == 2
        assert summary.configured == 2

    def test_disabled_entry_is_never_invoked(self, orchestrator: TaskOrchestrator, assets_dir: Path) -> None:
        master = _master(
            assets_dir,
            [
                {"taskName": "RecordingTask", "configFile": "off.json", "enabled": False},
                {"taskName": "RecordingTask", "configFile": "on.json"},
            ],
        )
        summary = orchestrator.run(master)
        assert RecordingTask.calls == ["on.json"]
        assert summary.skipped == ["RecordingTask"]

    def test_unknown_task_is_skipped_and_run_continues(
        self, orchestrator: TaskOrchestrator, assets_dir: Path, log_records
    ) -> None:
        master = _master(
            assets_dir,
            [
                {"taskName": "NoSuchTask", "configFile": "x.json"},
                {"taskName": "RecordingTask", "configFile": "after.json"},
            ],
        )
        summary = orchestrator.run(master)
        assert RecordingTask.calls == ["after.json"]
        assert summary.executed == 1
        assert any("no corresponding task type is registered" in r["message"] for r in log_records)

    def test_incomplete_entries_are_skipped(self, orchestrator: TaskOrchestrator, assets_dir: Path) -> None:
        master = _master(
            assets_dir,
            [
                {"taskName": "RecordingTask"},
                {"configFile": "a.json"},
                {"taskName": "RecordingTask", "configFile": "ok.json"},
            ],
        )
        summary = orchestrator.run(master)
        assert RecordingTask.calls == ["ok.json"]
        assert len(summary.skipped) == 2

    def test_first_failure_aborts_the_run(self, orchestrator: TaskOrchestrator, assets_dir: Path, log_records) -> None:
        master = _master(
            assets_dir,
            [
                {"taskName": "RecordingTask", "configFile": "before.json"},
                {"taskName": "ExplodingTask", "configFile": "boom.json"},
                {"taskName": "RecordingTask", "configFile": "never.json"},
            ],
        )
        with pytest.raises(RuntimeError, match="cannot process boom.json"):
            orchestrator.run(master)
        assert RecordingTask.calls == ["before.json"]
        assert not any("Finished processing tasks" in r["message"] for r in log_records)

    def test_construction_failure_aborts_the_run(self, orchestrator: TaskOrchestrator, assets_dir: Path) -> None:
        master = _master(
            assets_dir,
            [
                {"taskName": "UnconstructibleTask", "configFile": "a.json"},
                {"taskName": "RecordingTask", "configFile": "never.json"},
            ],
        )
        with pytest.raises(TypeError, match="bad constructor"):
            orchestrator.run(master)
        assert RecordingTask.calls == []

    def test_summary_is_logged(self, orchestrator: TaskOrchestrator, assets_dir: Path, log_records) -> None:
        orchestrator.run(_master(assets_dir, [{"taskName": "RecordingTask", "configFile": "a.json"}]))
        assert any(
            r["message"] == "Finished processing tasks. Executed 1 out of 1 configured task entries."
            and r["extra"]["task"] == "orchestrator"
            for r in log_records
        )


class TestEndToEnd:
    def test_builtin_tasks_reconcile_roles_and_profiles(self, org, assets_dir: Path) -> None:
        write_json(
            assets_dir / "config" / "TeamAssignments.json",
            {
                "teamAssignments": [
                    {
                        "teamId": str(org.sales.id),
                        "securityRoleIds": [str(org.role_a.id), str(org.role_b.id)],
                        "fieldSecurityProfileIds": [str(org.profile_x.id)],
                    }
                ]
            },
        )
        master = _master(
            assets_dir,
            [
                {"taskName": "DeclareTeamsRolesTask", "configFile": "config/TeamAssignments.json"},
                {"taskName": "DeclareTeamsColumnSecurityProfiles", "configFile": "config/TeamAssignments.json"},
            ],
        )
        summary = run_tasks(org.directory, assets_dir, master)

        assert summary.executed == 2
        assert org.roles_of(org.sales) == {org.role_a.id, org.role_b.id}
        assert org.profiles_of(org.sales) == {org.profile_x.id}
        assert org.directory.commit_count == 2

    def test_missing_task_config_aborts_the_run(self, org, assets_dir: Path) -> None:
        master = _master(assets_dir, [{"taskName": "DeclareTeamsRolesTask", "configFile": "absent.json"}])
        with pytest.raises(ConfigNotFoundError):
            run_tasks(org.directory, assets_dir, master)

    def test_dry_run_commits_nothing(self, org, assets_dir: Path) -> None:
        write_json(
            assets_dir / "TeamAssignments.json",
            {"teamAssignments": [{"name": "Sales", "securityRoleIds": []}]},
        )
        master = _master(assets_dir, [{"taskName": "DeclareTeamsRolesTask", "configFile": "TeamAssignments.json"}])
        summary = run_tasks(org.directory, assets_dir, master, dry_run=True)

        assert summary.executed == 1
        assert summary.reports[0].unlinked == 2
        assert org.directory.commit_count == 0
