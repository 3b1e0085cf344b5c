# src/taskboard/tasks/reminder_monitor.py

from __future__ import annotations

"""
Reminder monitor.

A small polling loop that:
- selects tasks whose reminder is due (pure filter),
- fires the notifier for each one,
- hands the ids back to the caller, who sets the `reminded` flag.

Flag-setting is caller-driven: a task is only protected from firing again
once that write has landed. Two overlapping checks can report the same task.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime

from ..core.ports import Notifier
from .date_utils import utc_now
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

TaskSource = Callable[[], Sequence[Task]]
FiredCallback = Callable[[list[str]], Awaitable[None]]


def check_reminders(tasks: Sequence[Task], now: datetime | None = None) -> list[Task]:
    """
    Tasks whose reminder should fire now, in collection order.

    Due means: reminder_time set, not yet reminded, not done,
    and reminder_time <= now.
    """
    now = now or utc_now()
    return [
        t
        for t in tasks
        if t.reminder_time is not None
        and not t.reminded
        and t.status != TaskStatus.DONE
        and t.reminder_time <= now
    ]


class ReminderMonitor:
    """
    Cancellable periodic reminder check.

    start() runs one check immediately and then every interval_seconds
    until stop() is called.
    """

    def __init__(
        self,
        get_tasks: TaskSource,
        notifier: Notifier,
        on_fired: FiredCallback,
        *,
        interval_seconds: float = 60.0,
    ) -> None:
        self._get_tasks = get_tasks
        self._notifier = notifier
        self._on_fired = on_fired
        self._interval = max(0.01, float(interval_seconds))
        self._runner: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def run_once(self, now: datetime | None = None) -> list[str]:
        try:
            due = check_reminders(self._get_tasks(), now)
        except Exception:
            logger.exception("Reminder selection failed")
            return []

        if not due:
            return []

        for task in due:
            try:
                self._notifier.notify(task)
                logger.info("Reminder fired task_id=%s", task.id)
            except Exception:
                logger.exception("Notifier failed task_id=%s", task.id)

        ids = [t.id for t in due]
        try:
            await self._on_fired(ids)
        except Exception:
            logger.exception("Marking reminders failed ids=%s", ids)
        return ids

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self.running:
            return
        self._runner = asyncio.create_task(self._loop(), name="reminder-monitor")
        logger.info("Reminder monitor started (interval=%.0fs)", self._interval)

    async def stop(self) -> None:
        runner, self._runner = self._runner, None
        if runner is None:
            return
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner
        logger.info("Reminder monitor stopped")
