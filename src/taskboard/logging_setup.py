# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

# Root of our own logger names (module __name__ values).
PACKAGE = __name__.partition(".")[0]

# Own loggers that tick on a timer: console shows them only at WARNING+.
QUIET_LOGGERS = (f"{PACKAGE}.tasks.reminder_monitor",)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for interactive use.

    Records under `package` pass, except the quiet ones below WARNING.
    Everything else (google/grpc clients, py.warnings) needs ERROR+.
    """

    def __init__(self, package: str = PACKAGE, quiet: Iterable[str] = QUIET_LOGGERS) -> None:
        super().__init__()
        self._prefix = f"{package}."
        self._quiet = frozenset(quiet)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name in self._quiet:
            return record.levelno >= logging.WARNING
        if record.name.startswith(self._prefix):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    log_name: str = PACKAGE,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler (filtered) plus a full DEBUG log at <log_dir>/<log_name>.log.

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{log_name or PACKAGE}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # Firestore pulls in chatty transport loggers.
    logging.getLogger("google").setLevel(logging.INFO)
    logging.getLogger("grpc").setLevel(logging.WARNING)
    return log_file
