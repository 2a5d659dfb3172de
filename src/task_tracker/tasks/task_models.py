# src/task_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """Task lifecycle status. Values are the strings stored in the JSON file."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus | None:
        """Case-insensitive lookup; None for anything that is not a known status."""
        if raw is None:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None

    @classmethod
    def choices(cls) -> str:
        return " | ".join(s.value for s in cls)


class UpdateResult(StrEnum):
    """Outcome of JsonTaskStore.update()."""

    UPDATED = "updated"
    NOT_FOUND = "not_found"
    INVALID_STATUS = "invalid_status"

    def __bool__(self) -> bool:
        return self is UpdateResult.UPDATED


@dataclass(slots=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    tags: list[str] = field(default_factory=list)
    notes: str | None = None

    def copy(self) -> Task:
        """Independent copy; the tags list is not shared."""
        return replace(self, tags=list(self.tags))

    def __str__(self) -> str:
        return f"{self.id} | {self.status} | {self.title}"
