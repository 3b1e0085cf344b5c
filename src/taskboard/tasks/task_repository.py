# src/taskboard/tasks/task_repository.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection, Iterable, Mapping
from dataclasses import replace
from typing import Any

from ..storage.sync_store import PersistentStore, SaveOutcome
from .date_utils import utc_now
from .task_codec import coerce_task_field, normalize_subtask_patch, normalize_task_patch
from .task_models import (
    MutationOutcome,
    Subtask,
    SubtaskStatus,
    Task,
    TaskMutation,
    TaskStatus,
)

logger = logging.getLogger(__name__)

# Fields a caller may supply to add(); everything else is generated.
_ADD_FIELDS = (
    "title",
    "description",
    "due_date",
    "reminder_time",
    "priority",
    "category",
    "tags",
    "subtasks",
)


def new_id(existing: Collection[str] = ()) -> str:
    """Opaque unique id; never collides with an id in `existing`."""
    while True:
        candidate = uuid.uuid4().hex
        if candidate not in existing:
            return candidate


def _outcome_of(saved: SaveOutcome) -> MutationOutcome:
    if saved == SaveOutcome.LOCAL_FAILED:
        return MutationOutcome.PERSIST_FAILED
    if saved == SaveOutcome.SYNC_FAILED:
        return MutationOutcome.SYNC_FAILED
    return MutationOutcome.OK


class TaskRepository:
    """
    CRUD over the task collection.

    Every operation follows the same snapshot pattern:
    read the full local collection, apply the change, write the full
    collection back, return the new collection.

    Unknown ids never raise: the unchanged collection is returned with
    outcome NOT_FOUND (and nothing is written).
    """

    def __init__(self, store: PersistentStore) -> None:
        self._store = store

    def list(self) -> list[Task]:
        return self._store.read_tasks()

    async def _commit(self, tasks: list[Task]) -> TaskMutation:
        saved = await self._store.save_tasks(tasks)
        return TaskMutation(tasks=tasks, outcome=_outcome_of(saved))

    # ---- tasks ----

    async def add(self, data: Mapping[str, Any]) -> TaskMutation:
        tasks = self.list()
        now = utc_now()

        fields = {k: coerce_task_field(k, data[k]) for k in _ADD_FIELDS if k in data}
        fields.setdefault("title", "")
        task = Task(
            id=new_id({t.id for t in tasks}),
            created_at=now,
            updated_at=now,
            status=TaskStatus.TODO,
            **fields,
        )

        updated = [*tasks, task]
        logger.info("Task added id=%s title=%r", task.id, task.title)
        return await self._commit(updated)

    async def update(self, task_id: str, patch: Mapping[str, Any]) -> TaskMutation:
        tasks = self.list()
        changes = normalize_task_patch(patch)

        found = False
        updated: list[Task] = []
        for task in tasks:
            if task.id == task_id:
                found = True
                task = replace(task, **{**changes, "updated_at": utc_now()})
            updated.append(task)

        if not found:
            logger.debug("update: task not found id=%s", task_id)
            return TaskMutation(tasks=tasks, outcome=MutationOutcome.NOT_FOUND)

        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return await self._commit(updated)

    async def delete(self, task_id: str) -> TaskMutation:
        tasks = self.list()
        updated = [t for t in tasks if t.id != task_id]
        if len(updated) == len(tasks):
            logger.debug("delete: task not found id=%s", task_id)
            return TaskMutation(tasks=tasks, outcome=MutationOutcome.NOT_FOUND)

        logger.info("Task deleted id=%s", task_id)
        return await self._commit(updated)

    async def batch_delete(self, task_ids: Iterable[str]) -> TaskMutation:
        ids = set(task_ids)
        tasks = self.list()
        updated = [t for t in tasks if t.id not in ids]
        if len(updated) == len(tasks):
            return TaskMutation(tasks=tasks, outcome=MutationOutcome.NOT_FOUND)

        logger.info("Tasks deleted count=%d", len(tasks) - len(updated))
        return await self._commit(updated)

    async def set_status(self, task_id: str, status: TaskStatus | str) -> TaskMutation:
        return await self.update(task_id, {"status": status})

    # ---- subtasks ----

    async def _mutate_subtasks(self, task_id: str, fn) -> TaskMutation:
        """
        Apply fn(subtasks, now) -> new subtasks | None to the parent task.

        None from fn means the subtask was not found.
        """
        tasks = self.list()
        now = utc_now()

        outcome = MutationOutcome.NOT_FOUND
        updated: list[Task] = []
        for task in tasks:
            if task.id == task_id:
                subs = fn(list(task.subtasks), now)
                if subs is not None:
                    outcome = MutationOutcome.OK
                    task = replace(task, subtasks=subs, updated_at=now)
            updated.append(task)

        if outcome == MutationOutcome.NOT_FOUND:
            logger.debug("subtask op: parent or subtask not found task_id=%s", task_id)
            return TaskMutation(tasks=tasks, outcome=outcome)
        return await self._commit(updated)

    async def add_subtask(self, task_id: str, title: str) -> TaskMutation:
        def _add(subs: list[Subtask], now) -> list[Subtask]:
            sub = Subtask(
                id=new_id({s.id for s in subs}),
                title=str(title),
                status=SubtaskStatus.TODO,
                created_at=now,
                updated_at=now,
            )
            return [*subs, sub]

        return await self._mutate_subtasks(task_id, _add)

    async def update_subtask(
        self, task_id: str, subtask_id: str, patch: Mapping[str, Any]
    ) -> TaskMutation:
        changes = normalize_subtask_patch(patch)

        def _update(subs: list[Subtask], now) -> list[Subtask] | None:
            out: list[Subtask] = []
            hit = False
            for sub in subs:
                if sub.id == subtask_id:
                    hit = True
                    sub = replace(sub, **{**changes, "updated_at": now})
                out.append(sub)
            return out if hit else None

        return await self._mutate_subtasks(task_id, _update)

    async def delete_subtask(self, task_id: str, subtask_id: str) -> TaskMutation:
        def _delete(subs: list[Subtask], now) -> list[Subtask] | None:
            out = [s for s in subs if s.id != subtask_id]
            return out if len(out) != len(subs) else None

        return await self._mutate_subtasks(task_id, _delete)

    async def set_subtask_status(
        self, task_id: str, subtask_id: str, status: SubtaskStatus | str
    ) -> TaskMutation:
        return await self.update_subtask(task_id, subtask_id, {"status": status})

    # ---- bulk helpers ----

    async def clear_category(self, category_id: str) -> TaskMutation:
        """Set category to "" on every task that references category_id."""
        tasks = self.list()
        now = utc_now()
        hits = 0
        updated: list[Task] = []
        for task in tasks:
            if category_id and task.category == category_id:
                hits += 1
                task = replace(task, category="", updated_at=now)
            updated.append(task)

        if not hits:
            return TaskMutation(tasks=tasks)
        logger.info("Cleared category=%s on %d tasks", category_id, hits)
        return await self._commit(updated)
