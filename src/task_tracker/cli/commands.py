# src/task_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..core.state import AppState
from ..tasks.task_models import TaskStatus, UpdateResult

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

PROG = "task-tracker"


class CommandRegistry:
    """Subcommand registry used by the CLI entrypoint (list, add, update, ...)."""

    def __init__(self, title: str = "Task Tracker") -> None:
        self._title = title
        self._handlers: dict[str, CommandHandler] = {}
        self._usage: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        usage: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._usage[key] = usage
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, argv: list[str]) -> str:
        """
        Dispatch ["command", *args] to its handler.
        Returns the text to print; empty argv yields the usage text.
        """
        if not argv:
            return self.build_help()

        name = argv[0].lower()
        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: {argv[0]}\n\n{self.build_help()}"

        logger.debug("Dispatching command=%s args=%s", name, argv[1:])
        return handler(state, argv[1:])

    def usage_for(self, name: str) -> str:
        return f"Usage: {PROG} {self._usage[name.lower()]}"

    def build_help(self) -> str:
        lines = [self._title, "Usage:"]
        for usage in self._usage.values():
            lines.append(f"  {PROG} {usage}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def strip_quotes(value: str) -> str:
    """Remove one pair of matching surrounding quotes ("..." or '...')."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def split_tags(value: str) -> list[str]:
    """'a, b,,c' -> ['a', 'b', 'c']; an empty value clears the tags."""
    return [t.strip() for t in value.split(",") if t.strip()]


def parse_options(args: Iterable[str], allowed: Iterable[str]) -> dict[str, str]:
    """
    Collect key=value arguments for the allowed keys (quotes stripped).
    Anything else is ignored; the last occurrence of a key wins.
    """
    keys = set(allowed)
    out: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or key not in keys:
            logger.debug("Ignoring argument %r", arg)
            continue
        out[key] = strip_quotes(value)
    return out


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    list              -> all tasks
    list <status>     -> only tasks with that status
    Unknown filters fall back to all tasks.
    """
    store = state.task_store
    status = TaskStatus.parse(args[0]) if args else None
    tasks = store.list_by_status(status) if status is not None else store.list_all()
    return "\n".join(str(t) for t in tasks)


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args or not strip_quotes(args[0]).strip():
        return registry.usage_for("add")

    title = strip_quotes(args[0])
    opts = parse_options(args[1:], ("tags", "notes"))
    tags = split_tags(opts["tags"]) if "tags" in opts else None

    task = state.task_store.add(title, tags=tags, notes=opts.get("notes"))
    return f"Added: {task.id}"


def cmd_update(state: AppState, args: list[str]) -> str:
    if not args:
        return registry.usage_for("update")

    task_id = args[0]
    opts = parse_options(args[1:], ("title", "status", "tags", "notes"))

    result = state.task_store.update(
        task_id,
        title=opts.get("title"),
        status=opts.get("status"),
        tags=split_tags(opts["tags"]) if "tags" in opts else None,
        notes=opts.get("notes"),
    )

    if result is UpdateResult.INVALID_STATUS:
        return f"Invalid status. Use: {TaskStatus.choices()}"
    if result is UpdateResult.NOT_FOUND:
        return "Not found."
    return "Updated."


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return registry.usage_for("delete")
    return "Deleted." if state.task_store.delete(args[0]) else "Not found."


registry.register("list", cmd_list, usage="list [all|todo|in_progress|done]", aliases=["ls"])
registry.register("add", cmd_add, usage='add "title" [tags=tag1,tag2] [notes="..."]')
registry.register(
    "update",
    cmd_update,
    usage='update <id> [title="..."] [status=todo|in_progress|done] [tags=a,b] [notes="..."]',
)
registry.register("delete", cmd_delete, usage="delete <id>", aliases=["rm"])
registry.register("help", cmd_help, usage="help", aliases=["-h", "--help"])
