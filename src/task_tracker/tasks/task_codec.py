# src/task_tracker/tasks/task_codec.py

"""
JSON codec for the task list.

On-disk format: a single JSON array, one object per task with the keys
id, title, status, createdAt, updatedAt, tags, notes.

Decoding is strict about structure (the document must be an array of objects
with an id) and lenient about values: a timestamp that does not parse becomes
EPOCH, an unknown status becomes "todo", a missing tags list becomes [].
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class TaskStoreError(Exception):
    """Base class for task storage errors (other than plain OSError)."""


class TaskParseError(TaskStoreError):
    """The document is not a JSON array of task objects."""


# ---- timestamps ----


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with a trailing 'Z' (e.g. 2025-01-31T12:00:00.123456Z)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(raw: Any) -> datetime:
    """Parse an ISO-8601 string; anything unparsable yields EPOCH."""
    if not isinstance(raw, str):
        return EPOCH
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        return EPOCH
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


# ---- decode ----


def _decode_timestamp(raw: Any, *, task_id: str, key: str) -> datetime:
    dt = parse_timestamp(raw)
    if dt is EPOCH:
        logger.warning("Task %s: unparsable %s=%r, using epoch", task_id, key, raw)
    return dt


def _decode_task(obj: Any, index: int) -> Task:
    if not isinstance(obj, dict):
        raise TaskParseError(f"task #{index} is not a JSON object")

    task_id = obj.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise TaskParseError(f"task #{index} has no id")

    raw_status = obj.get("status")
    status = TaskStatus.parse(raw_status) if isinstance(raw_status, str) else None
    if status is None:
        logger.warning("Task %s: unknown status %r, using todo", task_id, raw_status)
        status = TaskStatus.TODO

    raw_tags = obj.get("tags")
    tags = [str(t) for t in raw_tags] if isinstance(raw_tags, list) else []

    notes = obj.get("notes")

    return Task(
        id=task_id,
        title=str(obj.get("title") or ""),
        status=status,
        created_at=_decode_timestamp(obj.get("createdAt"), task_id=task_id, key="createdAt"),
        updated_at=_decode_timestamp(obj.get("updatedAt"), task_id=task_id, key="updatedAt"),
        tags=tags,
        notes=None if notes is None else str(notes),
    )


def decode_tasks(raw: str | bytes) -> list[Task]:
    """
    Decode a stored document into tasks.

    Empty document or JSON null -> [].
    Raises TaskParseError if the document is not a JSON array of task objects.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise TaskParseError(f"document is not UTF-8: {exc}") from exc

    if not raw.strip():
        return []

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise TaskParseError(f"invalid JSON: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, list):
        raise TaskParseError(f"expected a JSON array, got {type(data).__name__}")

    return [_decode_task(obj, i) for i, obj in enumerate(data)]


# ---- encode ----


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "status": task.status.value,
        "createdAt": format_timestamp(task.created_at),
        "updatedAt": format_timestamp(task.updated_at),
        "tags": list(task.tags),
        "notes": task.notes,
    }


def encode_tasks(tasks: Iterable[Task]) -> str:
    """Pretty-printed JSON array (2-space indent, trailing newline)."""
    return json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False, indent=2) + "\n"
