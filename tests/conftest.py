# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.storage.local_store import LocalStore
from taskboard.storage.sync_store import PersistentStore
from taskboard.tasks.task_repository import TaskRepository

from .fakes import FakeNotifier, FakeRemoteStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        data_dir=tmp_path,
        db_path=tmp_path / "taskboard.sqlite3",
        reminder_interval_seconds=0.01,
        notifications_enabled=True,
        notify_sound=False,
        sync_default=False,
        firestore_project=None,
        firestore_credentials=None,
        firestore_todos_collection="todos",
        firestore_categories_collection="categories",
    )


@pytest.fixture()
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def store(settings: SimpleNamespace, remote: FakeRemoteStore) -> PersistentStore:
    return PersistentStore(LocalStore(settings.db_path), remote)


@pytest.fixture()
def repo(store: PersistentStore) -> TaskRepository:
    return TaskRepository(store)


@pytest.fixture()
def state(
    settings: SimpleNamespace, remote: FakeRemoteStore, notifier: FakeNotifier
) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: We keep the real SQLite LocalStore here because snapshot
    persistence is part of what we want to test.
    """
    return create_initial_state(settings=settings, remote=remote, notifier=notifier)
