"""Configure loguru output and bind log lines to the task that emits them."""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

from .constants import ENGINE_LOG_TAG, HOST_LOG_LEVELS

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[task]}</cyan> | "
    "{message}"
)

logger.configure(extra={"task": ENGINE_LOG_TAG})


def normalize_level(level: str) -> str:
    """Map host severity names (``verbose``, ``information``) onto loguru levels."""
    key = (level or "").strip().lower()
    if key in HOST_LOG_LEVELS:
        return HOST_LOG_LEVELS[key]
    return key.upper() or "INFO"


def configure_logging(level: str = "INFO", sink: Any = None) -> None:
    """Replace every loguru sink with a single formatted one."""
    logger.remove()
    logger.add(
        sink if sink is not None else sys.stderr,
        level=normalize_level(level),
        format=LOG_FORMAT,
    )


def task_logger(task_name: str):
    return logger.bind(task=task_name or ENGINE_LOG_TAG)
