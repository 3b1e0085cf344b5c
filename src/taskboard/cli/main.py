# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads data (cloud-merged when sync is
on), starts the reminder monitor and runs the console connector. The monitor
is stopped when the console exits.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks import task_api
from .bootstrap import build_reminder_monitor, create_initial_state

logger = logging.getLogger(__name__)


async def run_app(state: AppState) -> None:
    await task_api.load_initial_data(state)

    monitor = build_reminder_monitor(state)
    monitor.start()
    try:
        await run_console_loop(state)
    finally:
        await monitor.stop()
        state.store.close()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskboard")
    app_name = str(getattr(settings, "app_name", "taskboard"))
    log_file = setup_logging(log_dir=log_dir, log_name=app_name, console_level=console_level)

    logger.info("Starting %s (log: %s)...", app_name, log_file)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(run_app(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
