# src/taskboard/core/state.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..storage.sync_store import PersistentStore
from ..tasks.category_repository import CategoryRepository
from ..tasks.task_filters import compute_statistics, filter_tasks
from ..tasks.task_models import (
    Category,
    FilterCriteria,
    MutationOutcome,
    Statistics,
    Task,
)
from ..tasks.task_repository import TaskRepository
from .ports import Notifier

logger = logging.getLogger(__name__)

StateListener = Callable[["AppState"], None]


@dataclass
class AppState:
    """
    The single owner of in-memory application state.

    Collections are only replaced with what a repository returned; views
    (filtered, statistics) are derived and recomputed by refresh_views().
    """

    settings: Any

    store: PersistentStore
    task_repo: TaskRepository
    category_repo: CategoryRepository
    notifier: Notifier

    tasks: list[Task] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    filters: FilterCriteria = field(default_factory=FilterCriteria)

    filtered: list[Task] = field(default_factory=list)
    statistics: Statistics = field(default_factory=Statistics)

    sync_enabled: bool = False
    last_outcome: MutationOutcome = MutationOutcome.OK

    listeners: list[StateListener] = field(default_factory=list)


def refresh_views(state: AppState) -> None:
    """Recompute derived views and republish to listeners."""
    state.filtered = filter_tasks(state.tasks, state.filters)
    state.statistics = compute_statistics(state.tasks)

    for listener in list(state.listeners):
        try:
            listener(state)
        except Exception:
            logger.exception("State listener failed: %r", listener)


def subscribe(state: AppState, listener: StateListener) -> Callable[[], None]:
    """Register a listener; returns an unsubscribe callable."""
    state.listeners.append(listener)

    def _unsubscribe() -> None:
        if listener in state.listeners:
            state.listeners.remove(listener)

    return _unsubscribe
