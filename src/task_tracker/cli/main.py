# src/task_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, opens the task store (creating tasks.json if missing),
then runs one command and prints its output.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry
from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]

    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)

    log_dir = settings.data_dir if getattr(settings, "log_to_file", True) else None
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "task-tracker"))

    # Startup failures (unreadable / unparsable task file) are fatal.
    state = create_initial_state(settings=settings)

    try:
        reply = registry.handle(state, argv)
    except (OSError, UnicodeError) as exc:
        logger.exception("Command failed: %s", argv)
        reason = getattr(exc, "strerror", None) or exc
        reply = f"Error: could not save {state.task_store.path}: {reason}"

    if reply:
        print(reply)


if __name__ == "__main__":
    main()
