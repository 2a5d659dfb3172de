# src/task_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local directories exist,
- opens the JSON task store and wires it into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import JsonTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    Raises OSError / TaskParseError if the task file cannot be created, read or parsed.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = JsonTaskStore(settings.tasks_path)
    logger.debug("State ready tasks_path=%s", settings.tasks_path)
    return AppState(settings=settings, task_store=store)
