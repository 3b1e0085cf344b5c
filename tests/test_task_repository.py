# tests/test_task_repository.py

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from taskboard.tasks.task_models import (
    MutationOutcome,
    Priority,
    SubtaskStatus,
    TaskStatus,
)
from taskboard.tasks.task_repository import TaskRepository


@pytest.mark.asyncio
async def test_add_appends_task_with_defaults(repo: TaskRepository) -> None:
    first = await repo.add({"title": "Write report"})
    second = await repo.add({"title": "Buy milk", "tags": ["home", "home", " shop "]})

    assert len(first.tasks) == 1
    assert len(second.tasks) == 2
    task = second.tasks[-1]
    assert task.status == TaskStatus.TODO
    assert task.priority == Priority.MEDIUM
    assert task.category == ""
    assert task.tags == ["home", "shop"]
    assert task.subtasks == []
    assert task.reminded is False
    assert task.created_at == task.updated_at
    assert task.id != second.tasks[0].id
    assert second.ok


@pytest.mark.asyncio
async def test_add_ignores_status_and_keeps_supplied_fields(repo: TaskRepository) -> None:
    due = datetime(2030, 1, 2, 9, 0, tzinfo=UTC)
    res = await repo.add(
        {"title": "Plan trip", "status": "done", "priority": "high", "due_date": due, "category": "2"}
    )
    task = res.tasks[0]
    assert task.status == TaskStatus.TODO
    assert task.priority == Priority.HIGH
    assert task.due_date == due
    assert task.category == "2"


@pytest.mark.asyncio
async def test_snapshot_is_persisted(repo: TaskRepository, store) -> None:
    await repo.add({"title": "Persist me"})
    again = TaskRepository(store)
    assert [t.title for t in again.list()] == ["Persist me"]


@pytest.mark.asyncio
async def test_update_merges_patch_and_is_idempotent(repo: TaskRepository) -> None:
    res = await repo.add({"title": "Draft"})
    task_id = res.tasks[0].id
    created = res.tasks[0].created_at

    patch = {"title": "Final", "priority": "low", "tags": ["x"]}
    once = await repo.update(task_id, patch)
    twice = await repo.update(task_id, patch)

    a, b = once.tasks[0], twice.tasks[0]
    for attr in ("id", "title", "priority", "tags", "status", "description", "created_at"):
        assert getattr(a, attr) == getattr(b, attr)
    assert b.title == "Final"
    assert b.priority == Priority.LOW
    assert b.updated_at >= a.updated_at >= created


@pytest.mark.asyncio
async def test_update_cannot_change_id_or_created_at(repo: TaskRepository) -> None:
    res = await repo.add({"title": "Stable"})
    original = res.tasks[0]

    out = await repo.update(original.id, {"id": "other", "created_at": "2000-01-01T00:00:00Z"})
    assert out.tasks[0].id == original.id
    assert out.tasks[0].created_at == original.created_at


@pytest.mark.asyncio
async def test_missing_ids_are_silent_no_ops(repo: TaskRepository) -> None:
    await repo.add({"title": "Only"})
    before = repo.list()

    for res in (
        await repo.update("missing", {"title": "x"}),
        await repo.delete("missing"),
        await repo.set_status("missing", "done"),
        await repo.add_subtask("missing", "child"),
    ):
        assert res.outcome == MutationOutcome.NOT_FOUND
        assert [t.id for t in res.tasks] == [t.id for t in before]
        assert res.tasks[0].title == "Only"


@pytest.mark.asyncio
async def test_delete_and_batch_delete(repo: TaskRepository) -> None:
    ids = []
    for title in ("a", "b", "c", "d"):
        ids.append((await repo.add({"title": title})).tasks[-1].id)

    res = await repo.delete(ids[0])
    assert [t.title for t in res.tasks] == ["b", "c", "d"]

    res = await repo.batch_delete([ids[1], ids[3], "nope"])
    assert [t.title for t in res.tasks] == ["c"]


@pytest.mark.asyncio
async def test_set_status(repo: TaskRepository) -> None:
    task_id = (await repo.add({"title": "Go"})).tasks[0].id
    res = await repo.set_status(task_id, TaskStatus.IN_PROGRESS)
    assert res.tasks[0].status == TaskStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_subtask_lifecycle(repo: TaskRepository) -> None:
    parent = (await repo.add({"title": "Release"})).tasks[0]

    res = await repo.add_subtask(parent.id, "Tag build")
    res = await repo.add_subtask(parent.id, "Publish notes")
    task = res.tasks[0]
    assert [s.title for s in task.subtasks] == ["Tag build", "Publish notes"]
    assert all(s.status == SubtaskStatus.TODO for s in task.subtasks)
    assert task.updated_at >= parent.updated_at
    first, second = task.subtasks

    res = await repo.set_subtask_status(parent.id, first.id, "done")
    assert res.tasks[0].subtasks[0].status == SubtaskStatus.DONE
    assert res.tasks[0].subtasks[0].updated_at >= first.updated_at

    res = await repo.update_subtask(parent.id, second.id, {"title": "Publish changelog"})
    assert res.tasks[0].subtasks[1].title == "Publish changelog"

    res = await repo.delete_subtask(parent.id, first.id)
    assert [s.id for s in res.tasks[0].subtasks] == [second.id]

    res = await repo.delete_subtask(parent.id, "missing")
    assert res.outcome == MutationOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_deleting_parent_drops_subtasks(repo: TaskRepository) -> None:
    parent = (await repo.add({"title": "Parent"})).tasks[0]
    await repo.add_subtask(parent.id, "child")
    res = await repo.delete(parent.id)
    assert res.tasks == []
    assert repo.list() == []


@pytest.mark.asyncio
async def test_returned_timestamps_match_stored_copy(repo: TaskRepository) -> None:
    first = (await repo.add({"title": "A"})).tasks[0]
    assert repo.list()[0].created_at == first.created_at
    assert repo.list()[0].updated_at == first.updated_at

    res = await repo.add({"title": "B"})
    assert res.tasks[0].created_at == first.created_at
    assert res.tasks[0] == first

    await repo.add_subtask(first.id, "child")
    returned = (await repo.update(first.id, {"title": "A2"})).tasks[0]
    stored = repo.list()[0]
    assert stored.updated_at == returned.updated_at
    assert stored.subtasks[0].created_at == returned.subtasks[0].created_at


@pytest.mark.asyncio
async def test_unparseable_date_in_patch_keeps_stored_value(repo: TaskRepository) -> None:
    due = datetime(2030, 1, 2, 9, 0, tzinfo=UTC)
    task_id = (await repo.add({"title": "Plan", "due_date": due})).tasks[0].id

    res = await repo.update(task_id, {"dueDate": "next tuesday", "title": "Plan B"})
    assert res.tasks[0].due_date == due
    assert res.tasks[0].title == "Plan B"

    res = await repo.update(task_id, {"dueDate": None})
    assert res.tasks[0].due_date is None
