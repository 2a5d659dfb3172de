# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_tracker.cli.bootstrap import create_initial_state
from task_tracker.core.state import AppState
from task_tracker.tasks.task_store import JsonTaskStore

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI entrypoint.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="task-tracker-test",
        log_level="WARNING",
        log_to_file=False,
        data_dir=tmp_path / "data",
        tasks_path=tmp_path / "tasks.json",
    )


@pytest.fixture()
def tasks_path(tmp_path: Path) -> Path:
    return tmp_path / "tasks.json"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(tasks_path: Path, clock: FakeClock) -> JsonTaskStore:
    return JsonTaskStore(tasks_path, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired through the real bootstrap (real JSON file under tmp_path)."""
    return create_initial_state(settings=settings)
