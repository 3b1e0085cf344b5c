# src/taskboard/tasks/task_api.py

"""
Application-level operations on AppState.

Every mutation goes through a repository; the returned collection replaces
the in-memory one and the derived views are republished. Input validation
for interactive callers (blank titles, unknown enum values) happens here and
raises ValueError; repositories themselves never raise on unknown ids.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..core.state import AppState, refresh_views
from .task_models import (
    ALL,
    Category,
    CategoryMutation,
    FilterCriteria,
    MutationOutcome,
    Priority,
    SubtaskStatus,
    Task,
    TaskMutation,
    TaskStatus,
)

logger = logging.getLogger(__name__)


def _apply_tasks(state: AppState, mutation: TaskMutation) -> MutationOutcome:
    state.tasks = mutation.tasks
    state.last_outcome = mutation.outcome
    if not mutation.ok and mutation.outcome != MutationOutcome.NOT_FOUND:
        logger.warning("Task change applied locally with outcome=%s", mutation.outcome.value)
    refresh_views(state)
    return mutation.outcome


def _apply_categories(state: AppState, mutation: CategoryMutation) -> MutationOutcome:
    state.categories = mutation.categories
    if mutation.tasks is not None:
        state.tasks = mutation.tasks
    state.last_outcome = mutation.outcome
    if not mutation.ok and mutation.outcome != MutationOutcome.NOT_FOUND:
        logger.warning("Category change applied locally with outcome=%s", mutation.outcome.value)
    refresh_views(state)
    return mutation.outcome


def _require_text(value: object, what: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValueError(f"{what} is required")
    return text


# ---- loading ----


async def load_initial_data(state: AppState) -> None:
    """Load tasks and categories (remote-merged when sync is on)."""
    state.sync_enabled = state.store.is_sync_enabled()
    state.tasks = await state.store.load_tasks()
    state.categories = await state.store.load_categories()
    logger.info(
        "Loaded %d tasks, %d categories (sync=%s)",
        len(state.tasks),
        len(state.categories),
        state.sync_enabled,
    )
    refresh_views(state)


# ---- tasks ----


async def add_task(state: AppState, data: Mapping[str, Any]) -> Task:
    payload = dict(data)
    payload["title"] = _require_text(payload.get("title"), "title")
    before = {t.id for t in state.tasks}
    _apply_tasks(state, await state.task_repo.add(payload))
    return next(t for t in state.tasks if t.id not in before)


async def update_task(state: AppState, task_id: str, patch: Mapping[str, Any]) -> MutationOutcome:
    if "title" in patch:
        patch = {**patch, "title": _require_text(patch["title"], "title")}
    return _apply_tasks(state, await state.task_repo.update(task_id, patch))


async def delete_task(state: AppState, task_id: str) -> MutationOutcome:
    return _apply_tasks(state, await state.task_repo.delete(task_id))


async def batch_delete_tasks(state: AppState, task_ids: Iterable[str]) -> MutationOutcome:
    return _apply_tasks(state, await state.task_repo.batch_delete(task_ids))


async def set_task_status(state: AppState, task_id: str, status: TaskStatus | str) -> MutationOutcome:
    return _apply_tasks(state, await state.task_repo.set_status(task_id, parse_status(status)))


async def mark_reminded(state: AppState, task_ids: Iterable[str]) -> None:
    """Reminder monitor callback: set reminded=True through the update path."""
    for task_id in task_ids:
        _apply_tasks(state, await state.task_repo.update(task_id, {"reminded": True}))


# ---- subtasks ----


async def add_subtask(state: AppState, task_id: str, title: str) -> MutationOutcome:
    title = _require_text(title, "subtask title")
    return _apply_tasks(state, await state.task_repo.add_subtask(task_id, title))


async def update_subtask(
    state: AppState, task_id: str, subtask_id: str, patch: Mapping[str, Any]
) -> MutationOutcome:
    if "title" in patch:
        patch = {**patch, "title": _require_text(patch["title"], "subtask title")}
    return _apply_tasks(state, await state.task_repo.update_subtask(task_id, subtask_id, patch))


async def delete_subtask(state: AppState, task_id: str, subtask_id: str) -> MutationOutcome:
    return _apply_tasks(state, await state.task_repo.delete_subtask(task_id, subtask_id))


async def set_subtask_status(
    state: AppState, task_id: str, subtask_id: str, status: SubtaskStatus | str
) -> MutationOutcome:
    value = status if isinstance(status, SubtaskStatus) else SubtaskStatus(str(status).lower())
    return _apply_tasks(
        state, await state.task_repo.set_subtask_status(task_id, subtask_id, value)
    )


# ---- categories ----


async def add_category(state: AppState, data: Mapping[str, Any]) -> Category:
    payload = dict(data)
    payload["name"] = _require_text(payload.get("name"), "category name")
    before = {c.id for c in state.categories}
    _apply_categories(state, await state.category_repo.add(payload))
    return next(c for c in state.categories if c.id not in before)


async def update_category(
    state: AppState, category_id: str, patch: Mapping[str, Any]
) -> MutationOutcome:
    if "name" in patch:
        patch = {**patch, "name": _require_text(patch["name"], "category name")}
    return _apply_categories(state, await state.category_repo.update(category_id, patch))


async def delete_category(state: AppState, category_id: str) -> MutationOutcome:
    return _apply_categories(state, await state.category_repo.delete(category_id))


# ---- filters ----


def parse_status(raw: object) -> TaskStatus:
    if isinstance(raw, TaskStatus):
        return raw
    text = str(raw or "").strip().lower().replace("_", "-")
    if text in ("progress", "doing", "wip"):
        text = TaskStatus.IN_PROGRESS.value
    try:
        return TaskStatus(text)
    except ValueError:
        valid = ", ".join(s.value for s in TaskStatus)
        raise ValueError(f"Invalid status '{raw}'. Valid statuses: {valid}") from None


def parse_priority(raw: object) -> Priority:
    if isinstance(raw, Priority):
        return raw
    try:
        return Priority(str(raw or "").strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in Priority)
        raise ValueError(f"Invalid priority '{raw}'. Valid priorities: {valid}") from None


def _as_list(raw: object) -> list[Any]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        return [p.strip() for p in raw.split(",") if p.strip()]
    if isinstance(raw, Iterable):
        return list(raw)
    return [raw]


def update_filters(state: AppState, patch: Mapping[str, Any]) -> FilterCriteria:
    """Merge a partial criteria patch onto the current filters."""
    current = state.filters
    status = current.status
    if "status" in patch:
        raw = patch["status"]
        status = ALL if raw in (None, "", ALL) else parse_status(raw)

    priority = current.priority
    if "priority" in patch:
        priority = [parse_priority(p) for p in _as_list(patch["priority"])]

    category = current.category
    if "category" in patch:
        category = [str(c) for c in _as_list(patch["category"])]

    search = current.search
    if "search" in patch:
        search = str(patch["search"] or "")

    state.filters = FilterCriteria(status=status, priority=priority, category=category, search=search)
    refresh_views(state)
    return state.filters


def reset_filters(state: AppState) -> FilterCriteria:
    state.filters = FilterCriteria()
    refresh_views(state)
    return state.filters


# ---- sync ----


def set_sync_enabled(state: AppState, enabled: bool) -> bool:
    state.store.set_sync_enabled(enabled)
    state.sync_enabled = state.store.is_sync_enabled()
    return state.sync_enabled


# ---- lookups ----


def resolve_task(state: AppState, ref: str) -> Task | None:
    """Find a task by full id or unique id prefix."""
    ref = (ref or "").strip()
    if not ref:
        return None
    hits = [t for t in state.tasks if t.id == ref]
    if hits:
        return hits[0]
    hits = [t for t in state.tasks if t.id.startswith(ref)]
    return hits[0] if len(hits) == 1 else None


def resolve_category(state: AppState, ref: str) -> Category | None:
    """Find a category by id or (case-insensitive) name."""
    ref = (ref or "").strip()
    for cat in state.categories:
        if cat.id == ref:
            return cat
    low = ref.lower()
    for cat in state.categories:
        if cat.name.lower() == low:
            return cat
    return None
