# src/taskboard/tasks/task_filters.py

"""Pure view computations over the in-memory task collection."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence

from .task_models import ALL, FilterCriteria, Priority, Statistics, Task, TaskStatus


def _matches_search(task: Task, keyword: str) -> bool:
    if keyword in task.title.lower():
        return True
    if keyword in (task.description or "").lower():
        return True
    return any(keyword in tag.lower() for tag in task.tags)


def filter_tasks(tasks: Sequence[Task], criteria: FilterCriteria) -> list[Task]:
    """
    Tasks matching every active criterion, in their original order.

    Dimensions are ANDed; within search, title/description/tags are ORed.
    An empty priority/category list or a blank search disables that dimension.
    """
    keyword = (criteria.search or "").strip().lower()
    priorities = set(criteria.priority)
    categories = set(criteria.category)

    out: list[Task] = []
    for task in tasks:
        if criteria.status != ALL and task.status != criteria.status:
            continue
        if priorities and task.priority not in priorities:
            continue
        if categories and task.category not in categories:
            continue
        if keyword and not _matches_search(task, keyword):
            continue
        out.append(task)
    return out


def completion_rate(done: int, total: int) -> int:
    if total <= 0:
        return 0
    # Round half up (2/3 -> 67, 1/8 -> 13), not banker's rounding.
    return int(math.floor(done * 100 / total + 0.5))


def compute_statistics(tasks: Sequence[Task]) -> Statistics:
    by_status = Counter(t.status for t in tasks)
    by_priority = Counter(t.priority for t in tasks)
    by_category = Counter(t.category for t in tasks if t.category)

    total = len(tasks)
    done = by_status[TaskStatus.DONE]
    return Statistics(
        total=total,
        done=done,
        in_progress=by_status[TaskStatus.IN_PROGRESS],
        todo=by_status[TaskStatus.TODO],
        priority_stats={p.value: by_priority[p] for p in Priority},
        category_stats=dict(by_category),
        completion_rate=completion_rate(done, total),
    )
