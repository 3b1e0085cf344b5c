# src/taskboard/tasks/category_repository.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..storage.sync_store import PersistentStore
from .task_models import DEFAULT_CATEGORY_COLOR, Category, CategoryMutation, MutationOutcome
from .task_repository import TaskRepository, _outcome_of, new_id

logger = logging.getLogger(__name__)


class CategoryRepository:
    """
    CRUD over the category collection (same snapshot pattern as TaskRepository).

    Tasks reference categories by id. Deleting a category never deletes
    tasks: it clears the reference on them instead.
    """

    def __init__(self, store: PersistentStore, tasks: TaskRepository) -> None:
        self._store = store
        self._tasks = tasks

    def list(self) -> list[Category]:
        return self._store.read_categories()

    async def _commit(self, categories: list[Category]) -> CategoryMutation:
        saved = await self._store.save_categories(categories)
        return CategoryMutation(categories=categories, outcome=_outcome_of(saved))

    async def add(self, data: Mapping[str, Any]) -> CategoryMutation:
        categories = self.list()
        cat = Category(
            id=new_id({c.id for c in categories}),
            name=str(data.get("name") or "").strip(),
            color=str(data.get("color") or DEFAULT_CATEGORY_COLOR),
        )
        logger.info("Category added id=%s name=%r", cat.id, cat.name)
        return await self._commit([*categories, cat])

    async def update(self, category_id: str, patch: Mapping[str, Any]) -> CategoryMutation:
        categories = self.list()
        changes: dict[str, str] = {}
        if patch.get("name") is not None:
            changes["name"] = str(patch["name"]).strip()
        if patch.get("color"):
            changes["color"] = str(patch["color"])

        found = False
        updated: list[Category] = []
        for cat in categories:
            if cat.id == category_id:
                found = True
                cat = replace(cat, **changes)
            updated.append(cat)

        if not found:
            return CategoryMutation(categories=categories, outcome=MutationOutcome.NOT_FOUND)
        return await self._commit(updated)

    async def delete(self, category_id: str) -> CategoryMutation:
        categories = self.list()
        updated = [c for c in categories if c.id != category_id]
        if len(updated) == len(categories):
            return CategoryMutation(categories=categories, outcome=MutationOutcome.NOT_FOUND)

        saved = await self._commit(updated)
        cleared = await self._tasks.clear_category(category_id)
        logger.info("Category deleted id=%s", category_id)

        outcome = saved.outcome if not saved.ok else cleared.outcome
        return CategoryMutation(categories=updated, tasks=cleared.tasks, outcome=outcome)
