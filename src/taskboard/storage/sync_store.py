# src/taskboard/storage/sync_store.py

"""
Persistent store with optional cloud sync.

Local storage is always authoritative for writes: every save goes to the
local key/value store first and is durable even if the cloud is down.

When the sync flag is on:
- load: a non-empty remote collection replaces the local copy wholesale
  (no per-record timestamps, no conflict detection); an empty or
  unreachable remote falls back to the local copy.
- save: each record is upserted to the remote independently, best-effort.
  Failures are logged, not retried, and never roll back the local write.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar

from ..core.ports import Record, RemoteStore
from ..tasks.task_codec import (
    categories_from_records,
    category_to_record,
    task_to_record,
    tasks_from_records,
)
from ..tasks.task_models import DEFAULT_CATEGORIES, Category, Task
from .local_store import LocalStore

logger = logging.getLogger(__name__)

TODOS_KEY = "todo-app-todos"
CATEGORIES_KEY = "todo-app-categories"
SYNC_ENABLED_KEY = "todo-app-sync-enabled"

T = TypeVar("T")


class SaveOutcome(StrEnum):
    OK = "ok"
    LOCAL_FAILED = "local_failed"
    SYNC_FAILED = "sync_failed"


@dataclass(frozen=True, slots=True)
class _Domain(Generic[T]):
    name: str
    key: str
    collection: str
    decode: Callable[[object], list[T]]
    encode: Callable[[T], Record]
    default: Callable[[], list[T]]


class PersistentStore:
    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore | None = None,
        *,
        todos_collection: str = "todos",
        categories_collection: str = "categories",
        sync_default: bool = False,
    ) -> None:
        self._local = local
        self._remote = remote
        self._sync_default = bool(sync_default)
        self._tasks = _Domain(
            name="tasks",
            key=TODOS_KEY,
            collection=todos_collection,
            decode=tasks_from_records,
            encode=task_to_record,
            default=list,
        )
        self._categories = _Domain(
            name="categories",
            key=CATEGORIES_KEY,
            collection=categories_collection,
            decode=categories_from_records,
            encode=category_to_record,
            default=lambda: [Category(c.id, c.name, c.color) for c in DEFAULT_CATEGORIES],
        )

    # ---- raw key/value ----

    def get(self, key: str, default: Any = None) -> Any:
        return self._local.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        return self._local.set(key, value)

    # ---- sync flag ----

    def is_sync_enabled(self) -> bool:
        raw = self._local.get(SYNC_ENABLED_KEY, None)
        if raw is None:
            return self._sync_default
        return raw is True

    def set_sync_enabled(self, enabled: bool) -> bool:
        ok = self._local.set(SYNC_ENABLED_KEY, bool(enabled))
        logger.info("Cloud sync %s", "enabled" if enabled else "disabled")
        return ok

    def remote_available(self) -> bool:
        return self._remote is not None and self._remote.is_configured()

    def close(self) -> None:
        """Best-effort shutdown of both stores."""
        self._local.close()
        close_remote = getattr(self._remote, "close", None)
        if callable(close_remote):
            try:
                close_remote()
            except Exception:
                logger.debug("Remote store close failed.", exc_info=True)

    # ---- domain API ----

    def read_tasks(self) -> list[Task]:
        return self._read_local(self._tasks)

    def read_categories(self) -> list[Category]:
        return self._read_local(self._categories)

    async def load_tasks(self) -> list[Task]:
        return await self._load(self._tasks)

    async def load_categories(self) -> list[Category]:
        return await self._load(self._categories)

    async def save_tasks(self, tasks: Sequence[Task]) -> SaveOutcome:
        return await self._save(self._tasks, tasks)

    async def save_categories(self, categories: Sequence[Category]) -> SaveOutcome:
        return await self._save(self._categories, categories)

    # ---- internals ----

    def _read_local(self, domain: _Domain[T]) -> list[T]:
        raw = self._local.get(domain.key, None)
        if raw is None:
            return domain.default()
        return domain.decode(raw)

    async def _load(self, domain: _Domain[T]) -> list[T]:
        if not self.is_sync_enabled() or not self.remote_available():
            return self._read_local(domain)

        assert self._remote is not None
        try:
            raw = await self._remote.fetch_all(domain.collection)
        except Exception:
            logger.exception("Remote fetch failed for %s; using local copy.", domain.name)
            return self._read_local(domain)

        items = domain.decode(raw)
        if not items:
            logger.info("Remote %s is empty; keeping local copy.", domain.name)
            return self._read_local(domain)

        # Remote wins wholesale.
        if not self._local.set(domain.key, [domain.encode(i) for i in items]):
            logger.warning("Could not overwrite local %s with remote copy.", domain.name)
        logger.info("Loaded %d %s from remote (local overwritten).", len(items), domain.name)
        return items

    async def _save(self, domain: _Domain[T], items: Sequence[T]) -> SaveOutcome:
        records = [domain.encode(i) for i in items]

        outcome = SaveOutcome.OK
        if not self._local.set(domain.key, records):
            outcome = SaveOutcome.LOCAL_FAILED

        if not self.is_sync_enabled():
            return outcome
        if not self.remote_available():
            logger.warning("Cloud sync is on but the remote store is not configured.")
            return outcome if outcome != SaveOutcome.OK else SaveOutcome.SYNC_FAILED

        assert self._remote is not None
        failed = 0
        for rec in records:
            try:
                await self._remote.upsert(domain.collection, str(rec["id"]), rec)
            except Exception:
                failed += 1
                logger.exception("Remote upsert failed %s id=%s", domain.name, rec.get("id"))

        if failed:
            logger.warning("Remote push of %s: %d/%d records failed.", domain.name, failed, len(records))
            if outcome == SaveOutcome.OK:
                outcome = SaveOutcome.SYNC_FAILED
        else:
            logger.debug("Remote push of %s: %d records.", domain.name, len(records))
        return outcome
