# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Literal

DEFAULT_CATEGORY_COLOR = "#1890ff"

ALL = "all"


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: object) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.TODO


class SubtaskStatus(StrEnum):
    TODO = "todo"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: object) -> SubtaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.TODO


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_raw(cls, raw: object) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(slots=True)
class Subtask:
    id: str
    title: str
    status: SubtaskStatus
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Task:
    """
    A to-do item.

    Defaults for optional fields live here and nowhere else:
    description "", no due/reminder time, medium priority, no category,
    no tags, status todo, no subtasks, not reminded.
    """

    id: str
    title: str
    created_at: datetime
    updated_at: datetime

    description: str = ""
    due_date: datetime | None = None
    reminder_time: datetime | None = None
    priority: Priority = Priority.MEDIUM
    category: str = ""
    tags: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.TODO
    subtasks: list[Subtask] = field(default_factory=list)
    reminded: bool = False


@dataclass(slots=True)
class Category:
    id: str
    name: str
    color: str = DEFAULT_CATEGORY_COLOR


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="1", name="Work", color="#1890ff"),
    Category(id="2", name="Life", color="#52c41a"),
    Category(id="3", name="Study", color="#faad14"),
)


@dataclass(slots=True)
class FilterCriteria:
    status: TaskStatus | Literal["all"] = ALL
    priority: list[Priority] = field(default_factory=list)
    category: list[str] = field(default_factory=list)
    search: str = ""


class MutationOutcome(StrEnum):
    """
    Result of a repository mutation.

    The in-memory collection returned alongside is always usable; a non-OK
    outcome only tells the caller what did not happen.
    """

    OK = "ok"
    NOT_FOUND = "not_found"
    PERSIST_FAILED = "persist_failed"
    SYNC_FAILED = "sync_failed"


@dataclass(slots=True, frozen=True)
class TaskMutation:
    tasks: list[Task]
    outcome: MutationOutcome = MutationOutcome.OK

    @property
    def ok(self) -> bool:
        return self.outcome == MutationOutcome.OK


@dataclass(slots=True, frozen=True)
class CategoryMutation:
    categories: list[Category]
    tasks: list[Task] | None = None
    outcome: MutationOutcome = MutationOutcome.OK

    @property
    def ok(self) -> bool:
        return self.outcome == MutationOutcome.OK


@dataclass(slots=True, frozen=True)
class Statistics:
    total: int = 0
    done: int = 0
    in_progress: int = 0
    todo: int = 0
    priority_stats: dict[str, int] = field(
        default_factory=lambda: {p.value: 0 for p in Priority}
    )
    category_stats: dict[str, int] = field(default_factory=dict)
    completion_rate: int = 0
