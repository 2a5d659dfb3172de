# tests/test_commands.py

from __future__ import annotations

import json

import pytest

from task_tracker.cli import main as cli_main
from task_tracker.cli.commands import (
    CommandRegistry,
    parse_options,
    registry,
    split_tags,
    strip_quotes,
)
from task_tracker.tasks.task_codec import TaskParseError
from task_tracker.tasks.task_models import TaskStatus
from task_tracker.tasks.task_store import JsonTaskStore


def _add(state, *args: str) -> str:
    reply = registry.handle(state, ["add", *args])
    assert reply.startswith("Added: ")
    return reply.removeprefix("Added: ")


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry(title="Test")
    seen: list[list[str]] = []

    def handler(state, args):
        seen.append(args)
        return "ok"

    reg.register("ping", handler, usage="ping <x>", aliases=["p"])

    assert reg.handle(state, ["ping", "1"]) == "ok"
    assert reg.handle(state, ["P", "2"]) == "ok"
    assert seen == [["1"], ["2"]]
    assert reg.usage_for("ping") == "Usage: task-tracker ping <x>"


def test_no_args_and_unknown_command_show_usage(state) -> None:
    usage = registry.handle(state, [])
    assert usage.startswith("Task Tracker\nUsage:")
    assert "task-tracker list [all|todo|in_progress|done]" in usage

    reply = registry.handle(state, ["frobnicate"])
    assert reply.startswith("Unknown command: frobnicate")
    assert usage in reply


def test_add_with_tags_and_quoted_notes(state) -> None:
    task_id = _add(state, "Write spec", "tags=docs, work", 'notes="first draft"')

    task = state.task_store.get(task_id)
    assert task.title == "Write spec"
    assert task.tags == ["docs", "work"]
    assert task.notes == "first draft"


def test_add_without_title_prints_usage(state) -> None:
    assert registry.handle(state, ["add"]).startswith("Usage: task-tracker add")
    assert registry.handle(state, ["add", '""']).startswith("Usage: task-tracker add")
    assert state.task_store.count() == 0


def test_list_prints_one_line_per_task(state) -> None:
    first = _add(state, "First")
    second = _add(state, "Second")
    state.task_store.update(second, status="done")

    assert registry.handle(state, ["list"]) == f"{first} | todo | First\n{second} | done | Second"
    assert registry.handle(state, ["list", "done"]) == f"{second} | done | Second"
    assert registry.handle(state, ["list", "in_progress"]) == ""
    # unknown filter falls back to all
    assert registry.handle(state, ["list", "whatever"]).count("\n") == 1


def test_update_messages(state) -> None:
    task_id = _add(state, "Task")

    assert registry.handle(state, ["update", task_id, "status=bogus"]) == (
        "Invalid status. Use: todo | in_progress | done"
    )
    assert registry.handle(state, ["update", "missing", "status=done"]) == "Not found."
    assert registry.handle(state, ["update", task_id, "status=in_progress", "title='Renamed'"]) == (
        "Updated."
    )
    assert registry.handle(state, ["update"]).startswith("Usage: task-tracker update")

    task = state.task_store.get(task_id)
    assert task.status is TaskStatus.IN_PROGRESS
    assert task.title == "Renamed"


def test_update_empty_tags_clears_them(state) -> None:
    task_id = _add(state, "Task", "tags=a,b")
    assert registry.handle(state, ["update", task_id, "tags="]) == "Updated."
    assert state.task_store.get(task_id).tags == []


def test_delete_messages(state) -> None:
    task_id = _add(state, "Task")

    assert registry.handle(state, ["delete", task_id]) == "Deleted."
    assert registry.handle(state, ["delete", task_id]) == "Not found."
    assert registry.handle(state, ["delete"]) == "Usage: task-tracker delete <id>"


def test_argument_helpers() -> None:
    assert strip_quotes('"quoted"') == "quoted"
    assert strip_quotes("'single'") == "single"
    assert strip_quotes("\"mismatched'") == "\"mismatched'"
    assert strip_quotes('"') == '"'

    assert split_tags("a, b,,c ") == ["a", "b", "c"]
    assert split_tags("") == []

    opts = parse_options(["title=x", "bogus", "other=1", "title='y'"], ("title",))
    assert opts == {"title": "y"}


# ---- entrypoint ----


@pytest.fixture()
def run_main(settings, monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setattr(cli_main, "get_settings", lambda: settings)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **kwargs: None)

    def run(*argv: str) -> str:
        cli_main.main(list(argv))
        return capsys.readouterr().out

    return run


def test_main_end_to_end(run_main, settings) -> None:
    assert "Usage:" in run_main()
    assert settings.tasks_path.exists()

    out = run_main("add", "Write spec")
    task_id = out.strip().removeprefix("Added: ")

    assert run_main("list", "all").strip() == f"{task_id} | todo | Write spec"
    assert run_main("update", task_id, "status=in_progress").strip() == "Updated."
    assert run_main("list", "in_progress").strip() == f"{task_id} | in_progress | Write spec"
    assert run_main("delete", task_id).strip() == "Deleted."
    assert json.loads(settings.tasks_path.read_text("utf-8")) == []


def test_main_reports_write_failure(run_main, settings, monkeypatch: pytest.MonkeyPatch) -> None:
    settings.tasks_path.write_text("[]", "utf-8")

    def boom(self, text):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(JsonTaskStore, "_write_file", boom)

    out = run_main("add", "t")
    assert out.startswith("Error: could not save")
    assert "No space left on device" in out


def test_main_startup_parse_error_is_fatal(run_main, settings) -> None:
    settings.tasks_path.write_text("{{{", "utf-8")
    with pytest.raises(TaskParseError):
        run_main("list")


def test_main_reports_unencodable_argument_without_crashing(run_main, settings) -> None:
    out = run_main("add", "bad \udcff title")

    assert out.startswith("Error: could not save")
    assert json.loads(settings.tasks_path.read_text("utf-8")) == []
    assert run_main("list") == ""
