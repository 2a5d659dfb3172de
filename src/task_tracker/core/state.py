# src/task_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import JsonTaskStore


@dataclass
class AppState:
    # Settings object (config.Settings in the app, SimpleNamespace in tests).
    settings: object

    task_store: JsonTaskStore
