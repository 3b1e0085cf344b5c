# src/taskboard/tasks/task_codec.py

"""
Record <-> model conversion.

Stored blobs and remote documents use camelCase field names, shared with the
web client (dueDate, reminderTime, createdAt, ...). Decoding is
defensive: there is no schema version, so missing fields take the model
defaults and malformed records are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .date_utils import format_ts, parse_datetime, utc_now
from .task_models import (
    DEFAULT_CATEGORY_COLOR,
    Category,
    Priority,
    Subtask,
    SubtaskStatus,
    Task,
    TaskStatus,
)

logger = logging.getLogger(__name__)

# python attribute -> record key
_TASK_KEYS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "due_date": "dueDate",
    "reminder_time": "reminderTime",
    "priority": "priority",
    "category": "category",
    "tags": "tags",
    "status": "status",
    "subtasks": "subtasks",
    "reminded": "reminded",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
_RECORD_TO_ATTR = {v: k for k, v in _TASK_KEYS.items()}

# Never changed by a patch.
IMMUTABLE_TASK_FIELDS = frozenset({"id", "created_at"})
IMMUTABLE_SUBTASK_FIELDS = frozenset({"id", "created_at"})

_DATE_FIELDS = frozenset({"due_date", "reminder_time", "updated_at"})


def normalize_tags(raw: object) -> list[str]:
    """Trimmed, non-empty, de-duplicated tags in first-seen order."""
    if raw is None:
        return []
    if isinstance(raw, str):
        items: Iterable[Any] = raw.split(",")
    elif isinstance(raw, Iterable):
        items = raw
    else:
        return []
    clean = [str(t).strip() for t in items if t is not None and str(t).strip()]
    return list(dict.fromkeys(clean))


def _as_text(raw: object) -> str:
    return "" if raw is None else str(raw)


def _as_bool(raw: object) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(raw)


# ---- subtasks ----


def subtask_from_record(raw: object) -> Subtask | None:
    if not isinstance(raw, Mapping) or not raw.get("id"):
        return None
    created = parse_datetime(raw.get("createdAt")) or utc_now()
    return Subtask(
        id=str(raw["id"]),
        title=_as_text(raw.get("title")),
        status=SubtaskStatus.from_raw(raw.get("status")),
        created_at=created,
        updated_at=parse_datetime(raw.get("updatedAt")) or created,
    )


def subtask_to_record(sub: Subtask) -> dict[str, Any]:
    return {
        "id": sub.id,
        "title": sub.title,
        "status": sub.status.value,
        "createdAt": format_ts(sub.created_at),
        "updatedAt": format_ts(sub.updated_at),
    }


def _subtasks_from_raw(raw: object) -> list[Subtask]:
    if not isinstance(raw, list):
        return []
    out: list[Subtask] = []
    for item in raw:
        if isinstance(item, Subtask):
            out.append(item)
            continue
        sub = subtask_from_record(item)
        if sub is not None:
            out.append(sub)
    return out


# ---- tasks ----


def task_from_record(raw: object) -> Task | None:
    """Build a Task from a stored record; None if the record is unusable."""
    if not isinstance(raw, Mapping):
        return None
    task_id = raw.get("id")
    if not task_id:
        return None

    created = parse_datetime(raw.get("createdAt")) or utc_now()
    return Task(
        id=str(task_id),
        title=_as_text(raw.get("title")),
        description=_as_text(raw.get("description")),
        due_date=parse_datetime(raw.get("dueDate")),
        reminder_time=parse_datetime(raw.get("reminderTime")),
        priority=Priority.from_raw(raw.get("priority")),
        category=_as_text(raw.get("category")),
        tags=normalize_tags(raw.get("tags")),
        status=TaskStatus.from_raw(raw.get("status")),
        subtasks=_subtasks_from_raw(raw.get("subtasks")),
        reminded=_as_bool(raw.get("reminded", False)),
        created_at=created,
        updated_at=parse_datetime(raw.get("updatedAt")) or created,
    )


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "dueDate": format_ts(task.due_date),
        "reminderTime": format_ts(task.reminder_time),
        "priority": task.priority.value,
        "category": task.category,
        "tags": list(task.tags),
        "status": task.status.value,
        "subtasks": [subtask_to_record(s) for s in task.subtasks],
        "reminded": task.reminded,
        "createdAt": format_ts(task.created_at),
        "updatedAt": format_ts(task.updated_at),
    }


def tasks_from_records(raw: object) -> list[Task]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Task collection is not a list (%s); using empty.", type(raw).__name__)
        return []
    out: list[Task] = []
    for item in raw:
        task = task_from_record(item)
        if task is None:
            logger.warning("Skipping malformed task record: %r", item)
            continue
        out.append(task)
    return out


def coerce_task_field(name: str, value: object) -> Any:
    """Coerce one patch value to the type the Task field holds."""
    if name in ("title", "description", "category"):
        return _as_text(value)
    if name in ("due_date", "reminder_time"):
        return parse_datetime(value)
    if name == "priority":
        return value if isinstance(value, Priority) else Priority.from_raw(value)
    if name == "status":
        return value if isinstance(value, TaskStatus) else TaskStatus.from_raw(value)
    if name == "tags":
        return normalize_tags(value)
    if name == "subtasks":
        return _subtasks_from_raw(value)
    if name == "reminded":
        return _as_bool(value)
    if name == "updated_at":
        return parse_datetime(value)
    raise KeyError(name)


def normalize_task_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """
    Map a patch (python or record key names) to coerced Task attributes.

    Unknown keys and immutable fields are dropped. An empty date clears the
    field; an unparseable one is dropped so the stored value survives.
    """
    out: dict[str, Any] = {}
    for key, value in patch.items():
        name = _RECORD_TO_ATTR.get(key, key)
        if name not in _TASK_KEYS:
            logger.debug("Ignoring unknown task field in patch: %s", key)
            continue
        if name in IMMUTABLE_TASK_FIELDS:
            logger.debug("Ignoring immutable task field in patch: %s", key)
            continue
        coerced = coerce_task_field(name, value)
        if name in _DATE_FIELDS and coerced is None and value not in (None, ""):
            logger.debug("Ignoring unparseable date in patch: %s=%r", key, value)
            continue
        out[name] = coerced
    return out


def normalize_subtask_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in patch.items():
        if key == "title":
            out["title"] = _as_text(value)
        elif key == "status":
            out["status"] = value if isinstance(value, SubtaskStatus) else SubtaskStatus.from_raw(value)
        else:
            logger.debug("Ignoring subtask field in patch: %s", key)
    return out


# ---- categories ----


def category_from_record(raw: object) -> Category | None:
    if not isinstance(raw, Mapping) or not raw.get("id"):
        return None
    return Category(
        id=str(raw["id"]),
        name=_as_text(raw.get("name")),
        color=_as_text(raw.get("color")) or DEFAULT_CATEGORY_COLOR,
    )


def category_to_record(cat: Category) -> dict[str, Any]:
    return {"id": cat.id, "name": cat.name, "color": cat.color}


def categories_from_records(raw: object) -> list[Category]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Category collection is not a list (%s); using empty.", type(raw).__name__)
        return []
    out: list[Category] = []
    for item in raw:
        cat = category_from_record(item)
        if cat is None:
            logger.warning("Skipping malformed category record: %r", item)
            continue
        out.append(cat)
    return out
