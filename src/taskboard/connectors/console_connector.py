# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def read_line(prompt: str = PROMPT) -> str:
    """
    Read one line from stdin without blocking the event loop.

    input() runs in a daemon thread that hands the result back via
    call_soon_threadsafe. The thread is never joined: cancelling the
    awaiting task (Ctrl-C under asyncio.run) returns at once, and
    interpreter shutdown does not wait for Enter. EOFError from input()
    is re-raised in the caller.
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def _deliver(result: str, exc: Exception | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(result)

    def _worker() -> None:
        result = ""
        error: Exception | None = None
        try:
            result = input(prompt)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_deliver, result, error)
        except RuntimeError:
            logger.debug("Console input arrived after loop shutdown.")

    threading.Thread(target=_worker, name="console-input", daemon=True).start()
    return await fut


async def run_console_loop(state: AppState) -> None:
    """
    Interactive loop.

    Input is read off-loop (see read_line) so the reminder monitor keeps
    running while the user is typing, and Ctrl-C cancels promptly.
    """
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "taskboard"))
    logger.info("Console connector started.")
    _print_ts(f"[{app_name}] Use /help for commands, /list to see tasks, /exit to quit.\n")

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = (await read_line(PROMPT)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a quick add.
            user_input = "/add " + user_input

        try:
            reply = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            _print_ts(reply)

    logger.info("Console connector finished.")
