# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import os
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path

from .task_codec import TaskParseError, decode_tasks, encode_tasks
from .task_models import Task, TaskStatus, UpdateResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class JsonTaskStore:
    """
    JSON-file task store.

    The whole task list lives in memory and the file is rewritten in full after
    every successful mutation (temp file + os.replace). If the write fails, the
    in-memory change is reverted before the error propagates, so the cache
    never diverges from what is on disk.

    Thread-safety:
    - every public method runs under one RLock owned by the instance
    - accessors return copies, never the cached Task objects
    - other processes touching the same file are not coordinated with
    """

    def __init__(self, path: str | Path = "tasks.json", *, clock: Clock | None = None) -> None:
        self._path = Path(path)
        self._clock: Clock = clock or _utc_now
        self._lock = threading.RLock()
        self._tasks: list[Task] = []

        with self._lock:
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._save()
                logger.info("Created empty task file %s", self._path)
            self._load()
        logger.info("JsonTaskStore ready path=%s total=%s", self._path, len(self._tasks))

    @property
    def path(self) -> Path:
        return self._path

    # ---- low-level helpers ----

    def _load(self) -> None:
        raw = self._path.read_bytes()
        try:
            self._tasks = decode_tasks(raw)
        except TaskParseError as exc:
            raise TaskParseError(f"{self._path}: {exc}") from exc

    def _save(self) -> None:
        # Encode up front so a bad string fails before the disk is touched.
        self._write_file(encode_tasks(self._tasks).encode("utf-8"))

    def _write_file(self, data: bytes) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, self._path)
        except Exception:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise
        logger.debug("Saved %d tasks to %s", len(self._tasks), self._path)

    def _find_index(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    def _now_after(self, previous: datetime) -> datetime:
        now = self._clock()
        return now if now >= previous else previous

    # ---- public API ----

    def reload(self) -> None:
        """Re-read the file, replacing the in-memory list."""
        with self._lock:
            self._load()

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def list_all(self) -> list[Task]:
        with self._lock:
            return [t.copy() for t in self._tasks]

    def list_by_status(self, status: str) -> list[Task]:
        wanted = status.strip().lower()
        with self._lock:
            return [t.copy() for t in self._tasks if t.status.value == wanted]

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            idx = self._find_index(task_id)
            return None if idx is None else self._tasks[idx].copy()

    def add(
        self,
        title: str,
        tags: Iterable[str] | None = None,
        notes: str | None = None,
    ) -> Task:
        if not title or not title.strip():
            raise ValueError("title is required")

        with self._lock:
            now = self._clock()
            task = Task(
                id=str(uuid.uuid4()),
                title=title,
                status=TaskStatus.TODO,
                created_at=now,
                updated_at=now,
                tags=list(tags) if tags is not None else [],
                notes=notes,
            )
            self._tasks.append(task)
            try:
                self._save()
            except Exception:
                self._tasks.pop()
                logger.exception("Failed to persist new task; add reverted.")
                raise

            logger.info("Task added id=%s", task.id)
            return task.copy()

    def update(
        self,
        task_id: str,
        *,
        title: str | None = None,
        status: str | None = None,
        tags: Iterable[str] | None = None,
        notes: str | None = None,
    ) -> UpdateResult:
        """
        Partial update.

        - title: applied only if non-blank
        - status: blank means "not supplied"; anything else must be a valid
          status or the whole update is rejected (nothing changed or written)
        - tags / notes: replace the current value whenever not None
        """
        with self._lock:
            idx = self._find_index(task_id)
            if idx is None:
                return UpdateResult.NOT_FOUND

            new_status: TaskStatus | None = None
            if status is not None and status.strip():
                new_status = TaskStatus.parse(status)
                if new_status is None:
                    logger.info("Rejected update id=%s invalid status=%r", task_id, status)
                    return UpdateResult.INVALID_STATUS

            original = self._tasks[idx]
            task = original.copy()
            if title is not None and title.strip():
                task.title = title
            if new_status is not None:
                task.status = new_status
            if tags is not None:
                task.tags = list(tags)
            if notes is not None:
                task.notes = notes
            task.updated_at = self._now_after(original.updated_at)

            self._tasks[idx] = task
            try:
                self._save()
            except Exception:
                self._tasks[idx] = original
                logger.exception("Failed to persist update id=%s; reverted.", task_id)
                raise

            logger.info("Task updated id=%s status=%s", task_id, task.status)
            return UpdateResult.UPDATED

    def delete(self, task_id: str) -> bool:
        with self._lock:
            idx = self._find_index(task_id)
            if idx is None:
                return False

            removed = self._tasks.pop(idx)
            try:
                self._save()
            except Exception:
                self._tasks.insert(idx, removed)
                logger.exception("Failed to persist delete id=%s; reverted.", task_id)
                raise

            logger.info("Task deleted id=%s", task_id)
            return True
