"""Tests for logging_utils module."""

from __future__ import annotations

import io

import pytest
from loguru import logger

from team_sync_runner.logging_utils import configure_logging, normalize_level, task_logger


class TestNormalizeLevel:
    @pytest.mark.parametrize(
        "given, expected",
        [
            ("verbose", "DEBUG"),
            ("Information", "INFO"),
            ("info", "INFO"),
            ("warning", "WARNING"),
            ("error", "ERROR"),
            ("trace", "TRACE"),
            ("", "INFO"),
        ],
    )
    def test_host_names_map_to_loguru(self, given: str, expected: str) -> None:
        assert normalize_level(given) == expected


class TestConfigureLogging:
    def test_lines_carry_task_tag(self) -> None:
        buffer = io.StringIO()
        configure_logging("verbose", sink=buffer)
        try:
            task_logger("DeclareTeamsRolesTask").debug("planning")
            logger.info("engine line")
        finally:
            logger.remove()

        lines = buffer.getvalue().splitlines()
        assert "DeclareTeamsRolesTask | planning" in lines[0]
        assert "orchestrator | engine line" in lines[1]

    def test_threshold_filters_lower_levels(self) -> None:
        buffer = io.StringIO()
        configure_logging("warning", sink=buffer)
        try:
            logger.info("hidden")
            logger.warning("shown")
        finally:
            logger.remove()

        output = buffer.getvalue()
        assert "hidden" not in output
        assert "shown" in output
