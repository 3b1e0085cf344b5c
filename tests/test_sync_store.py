# tests/test_sync_store.py

from __future__ import annotations

import sqlite3

import pytest

from taskboard.storage.local_store import LocalStore
from taskboard.storage.sync_store import (
    CATEGORIES_KEY,
    SYNC_ENABLED_KEY,
    TODOS_KEY,
    PersistentStore,
    SaveOutcome,
)
from taskboard.tasks.task_codec import tasks_from_records
from taskboard.tasks.task_models import Category, MutationOutcome
from taskboard.tasks.task_repository import TaskRepository

from .fakes import FakeRemoteStore


def _rec(task_id: str, title: str) -> dict:
    return {
        "id": task_id,
        "title": title,
        "status": "todo",
        "priority": "medium",
        "createdAt": "2024-05-01T10:00:00.000Z",
        "updatedAt": "2024-05-01T10:00:00.000Z",
    }


@pytest.fixture()
def local(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "kv.sqlite3")


def test_local_store_roundtrip_and_defaults(local: LocalStore) -> None:
    assert local.get("missing", "fallback") == "fallback"
    assert local.set("k", {"a": [1, 2]}) is True
    assert local.get("k") == {"a": [1, 2]}
    assert local.keys() == ["k"]
    assert local.remove("k") is True
    assert local.get("k") is None


def test_local_store_rejects_unencodable_value(local: LocalStore) -> None:
    assert local.set("k", object()) is False
    assert local.get("k", 1) == 1


def test_sync_flag_defaults_and_persists(local: LocalStore) -> None:
    store = PersistentStore(local, FakeRemoteStore())
    assert store.is_sync_enabled() is False
    store.set_sync_enabled(True)
    assert store.is_sync_enabled() is True
    assert local.get(SYNC_ENABLED_KEY) is True

    assert PersistentStore(local, None, sync_default=False).is_sync_enabled() is True


def test_sync_flag_default_from_settings(local: LocalStore) -> None:
    assert PersistentStore(local, None, sync_default=True).is_sync_enabled() is True
    local.set(SYNC_ENABLED_KEY, "yes")
    assert PersistentStore(local, None, sync_default=True).is_sync_enabled() is False


def test_read_defaults_when_nothing_stored(local: LocalStore) -> None:
    store = PersistentStore(local)
    assert store.read_tasks() == []
    assert [c.name for c in store.read_categories()] == ["Work", "Life", "Study"]


def test_read_skips_malformed_records(local: LocalStore) -> None:
    local.set(TODOS_KEY, [_rec("a", "ok"), {"title": "no id"}, "junk", _rec("b", "fine")])
    assert [t.id for t in PersistentStore(local).read_tasks()] == ["a", "b"]

    local.set(TODOS_KEY, {"not": "a list"})
    assert PersistentStore(local).read_tasks() == []


@pytest.mark.asyncio
async def test_load_with_sync_off_ignores_remote(local: LocalStore) -> None:
    remote = FakeRemoteStore()
    remote.seed("todos", [_rec("r1", "remote")])
    local.set(TODOS_KEY, [_rec("l1", "local")])

    store = PersistentStore(local, remote)
    assert [t.id for t in await store.load_tasks()] == ["l1"]


@pytest.mark.asyncio
async def test_non_empty_remote_replaces_local(local: LocalStore) -> None:
    remote = FakeRemoteStore()
    remote.seed("todos", [_rec("r1", "remote")])
    local.set(TODOS_KEY, [_rec("l1", "local")])
    local.set(SYNC_ENABLED_KEY, True)

    store = PersistentStore(local, remote)
    tasks = await store.load_tasks()

    assert [t.id for t in tasks] == ["r1"]
    assert [t.id for t in tasks_from_records(local.get(TODOS_KEY))] == ["r1"]


@pytest.mark.asyncio
async def test_empty_remote_keeps_local(local: LocalStore) -> None:
    local.set(TODOS_KEY, [_rec("l1", "local")])
    local.set(SYNC_ENABLED_KEY, True)

    store = PersistentStore(local, FakeRemoteStore())
    assert [t.id for t in await store.load_tasks()] == ["l1"]
    assert [c.id for c in await store.load_categories()] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_unreachable_remote_falls_back_to_local(local: LocalStore) -> None:
    remote = FakeRemoteStore()
    remote.seed("todos", [_rec("r1", "remote")])
    remote.fail_fetch = True
    local.set(TODOS_KEY, [_rec("l1", "local")])
    local.set(SYNC_ENABLED_KEY, True)

    store = PersistentStore(local, remote)
    assert [t.id for t in await store.load_tasks()] == ["l1"]


@pytest.mark.asyncio
async def test_save_writes_local_and_upserts_each_record(local: LocalStore) -> None:
    remote = FakeRemoteStore()
    local.set(SYNC_ENABLED_KEY, True)
    store = PersistentStore(local, remote, categories_collection="cats")

    cats = [Category("1", "Work"), Category("9", "Garden", "#00ff00")]
    assert await store.save_categories(cats) == SaveOutcome.OK

    assert [c["id"] for c in local.get(CATEGORIES_KEY)] == ["1", "9"]
    assert remote.upserts == [("cats", "1"), ("cats", "9")]
    assert remote.docs["cats"]["9"]["color"] == "#00ff00"


@pytest.mark.asyncio
async def test_save_with_sync_off_stays_local(local: LocalStore) -> None:
    remote = FakeRemoteStore()
    store = PersistentStore(local, remote)
    assert await store.save_categories([Category("1", "Work")]) == SaveOutcome.OK
    assert remote.upserts == []


@pytest.mark.asyncio
async def test_partial_remote_failure_keeps_local_write(local: LocalStore) -> None:
    remote = FakeRemoteStore()
    remote.fail_upsert_ids = {"1"}
    local.set(SYNC_ENABLED_KEY, True)
    store = PersistentStore(local, remote)

    cats = [Category("1", "Work"), Category("2", "Life")]
    assert await store.save_categories(cats) == SaveOutcome.SYNC_FAILED

    assert [c["id"] for c in local.get(CATEGORIES_KEY)] == ["1", "2"]
    assert remote.upserts == [("categories", "2")]


@pytest.mark.asyncio
async def test_sync_on_without_configured_remote_reports_sync_failed(local: LocalStore) -> None:
    local.set(SYNC_ENABLED_KEY, True)
    store = PersistentStore(local, FakeRemoteStore(configured=False))

    assert await store.save_categories([Category("1", "Work")]) == SaveOutcome.SYNC_FAILED
    assert local.get(CATEGORIES_KEY) == [{"id": "1", "name": "Work", "color": "#1890ff"}]


class FailingLocalStore(LocalStore):
    """LocalStore whose writes always fail (reads still work)."""

    def set(self, key, value) -> bool:
        return False


def test_corrupt_json_blob_reads_as_default(local: LocalStore) -> None:
    conn = sqlite3.connect(str(local.db_path))
    try:
        conn.execute(
            "INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)",
            (TODOS_KEY, "{not json", 0.0),
        )
        conn.execute(
            "INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)",
            (CATEGORIES_KEY, "[[[", 0.0),
        )
        conn.commit()
    finally:
        conn.close()

    assert local.get(TODOS_KEY, "fallback") == "fallback"
    store = PersistentStore(local)
    assert store.read_tasks() == []
    assert [c.id for c in store.read_categories()] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_failed_local_write_reports_local_failed(tmp_path) -> None:
    remote = FakeRemoteStore()
    store = PersistentStore(FailingLocalStore(tmp_path / "ro.sqlite3"), remote, sync_default=True)

    assert await store.save_categories([Category("1", "Work")]) == SaveOutcome.LOCAL_FAILED
    # Remote push still happens; the local failure wins the outcome.
    assert remote.upserts == [("categories", "1")]

    remote.fail_upsert_ids = {"1"}
    assert await store.save_categories([Category("1", "Work")]) == SaveOutcome.LOCAL_FAILED


@pytest.mark.asyncio
async def test_failed_local_write_maps_to_persist_failed(tmp_path) -> None:
    repo = TaskRepository(PersistentStore(FailingLocalStore(tmp_path / "ro.sqlite3")))

    res = await repo.add({"title": "Unsaved"})
    assert res.outcome == MutationOutcome.PERSIST_FAILED
    assert [t.title for t in res.tasks] == ["Unsaved"]
    assert repo.list() == []
