"""Provide the public `team_sync_runner` package exports."""

from __future__ import annotations

from .orchestrator import RunSummary, TaskOrchestrator, run_tasks

__all__ = ["RunSummary", "TaskOrchestrator", "run_tasks"]
