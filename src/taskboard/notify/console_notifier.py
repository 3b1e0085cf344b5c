# src/taskboard/notify/console_notifier.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

BELL = "\a"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """
    Terminal alert: an audible bell plus a timestamped reminder line.

    When alerts are not permitted (enabled=False) notify() does nothing.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        sound: bool = True,
        stream: TextIO | None = None,
    ) -> None:
        self.enabled = enabled
        self.sound = sound
        self._stream = stream

    def notify(self, task: Task) -> None:
        if not self.enabled:
            logger.debug("Notifications disabled; skipping task_id=%s", task.id)
            return

        out = self._stream or sys.stdout
        prefix = BELL if self.sound else ""
        out.write(f"{prefix}\n[{_ts_local()}] [REMINDER] {task.title}\n")
        out.flush()
