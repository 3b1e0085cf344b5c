# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (local store, Firestore,
  repositories, notifier),
- builds the reminder monitor bound to that state.
"""

from __future__ import annotations

import logging
from functools import partial

from ..config import get_settings
from ..core.ports import Notifier, RemoteStore
from ..core.state import AppState
from ..notify.console_notifier import ConsoleNotifier
from ..storage.local_store import LocalStore
from ..storage.remote_store import FirestoreRemoteStore
from ..storage.sync_store import PersistentStore
from ..tasks import task_api
from ..tasks.category_repository import CategoryRepository
from ..tasks.reminder_monitor import ReminderMonitor
from ..tasks.task_repository import TaskRepository

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_remote(settings) -> RemoteStore:
    return FirestoreRemoteStore(
        project=getattr(settings, "firestore_project", None),
        credentials_path=getattr(settings, "firestore_credentials", None),
    )


def create_initial_state(
    *,
    settings=None,
    remote: RemoteStore | None = None,
    notifier: Notifier | None = None,
) -> AppState:
    """
    Create AppState from the provided settings (nothing is loaded yet).

    Keeping settings and collaborators injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if remote is None:
        remote = _build_remote(settings)

    store = PersistentStore(
        LocalStore(settings.db_path),
        remote,
        todos_collection=getattr(settings, "firestore_todos_collection", "todos"),
        categories_collection=getattr(settings, "firestore_categories_collection", "categories"),
        sync_default=bool(getattr(settings, "sync_default", False)),
    )
    task_repo = TaskRepository(store)

    if notifier is None:
        notifier = ConsoleNotifier(
            enabled=bool(getattr(settings, "notifications_enabled", True)),
            sound=bool(getattr(settings, "notify_sound", True)),
        )

    return AppState(
        settings=settings,
        store=store,
        task_repo=task_repo,
        category_repo=CategoryRepository(store, task_repo),
        notifier=notifier,
    )


def build_reminder_monitor(state: AppState) -> ReminderMonitor:
    return ReminderMonitor(
        lambda: state.tasks,
        state.notifier,
        partial(task_api.mark_reminded, state),
        interval_seconds=float(getattr(state.settings, "reminder_interval_seconds", 60.0)),
    )
