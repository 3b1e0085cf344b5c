# tests/test_console_notifier.py

from __future__ import annotations

import io
from datetime import UTC, datetime

from taskboard.notify.console_notifier import BELL, ConsoleNotifier
from taskboard.tasks.task_models import Task

NOW = datetime(2024, 5, 1, tzinfo=UTC)


def _task() -> Task:
    return Task(id="t1", title="Water plants", created_at=NOW, updated_at=NOW)


def test_notify_writes_bell_and_title() -> None:
    out = io.StringIO()
    ConsoleNotifier(stream=out).notify(_task())
    text = out.getvalue()
    assert text.startswith(BELL)
    assert "[REMINDER] Water plants" in text


def test_notify_without_sound() -> None:
    out = io.StringIO()
    ConsoleNotifier(sound=False, stream=out).notify(_task())
    assert BELL not in out.getvalue()
    assert "Water plants" in out.getvalue()


def test_disabled_notifier_is_silent() -> None:
    out = io.StringIO()
    ConsoleNotifier(enabled=False, stream=out).notify(_task())
    assert out.getvalue() == ""
