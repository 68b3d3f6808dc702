"""Derived views of the task collection.

Everything here is a pure function of the collection and the transient
view state. Nothing is cached; callers recompute on every read.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from taskpad.models import StatusFilter, Task
from taskpad.store import StoreState

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class TaskCounts:
    """Aggregate counts over the whole, unfiltered collection."""

    total: int
    active: int
    completed: int


def filter_tasks(
    tasks: Iterable[Task],
    status_filter: StatusFilter = "all",
    search: str = "",
    combine: bool = False,
) -> list[Task]:
    """Select the tasks visible under a status filter and search term.

    By default the two are layered, not intersected: a status filter other
    than "all" wins and the search term is ignored. With ``combine`` both
    predicates must match.
    """
    needle = search.lower()

    def matches_status(task: Task) -> bool:
        if status_filter == "active":
            return not task.completed
        if status_filter == "completed":
            return task.completed
        return True

    def matches_search(task: Task) -> bool:
        return not needle or needle in task.text.lower()

    if combine:
        return [t for t in tasks if matches_status(t) and matches_search(t)]

    if status_filter != "all":
        return [t for t in tasks if matches_status(t)]
    return [t for t in tasks if matches_search(t)]


def _sort_key(task: Task) -> tuple:
    return (
        task.completed,
        -PRIORITY_RANK[task.priority],
        task.due_date is None,
        task.due_date or date.max,
        -task.created_at.timestamp(),
    )


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Order tasks for display.

    Open before completed, then high > medium > low, then dated before
    undated with the earlier date first, then newest created first.
    """
    return sorted(tasks, key=_sort_key)


def counts(tasks: Sequence[Task]) -> TaskCounts:
    """Count total, active and completed tasks."""
    completed = sum(1 for t in tasks if t.completed)
    return TaskCounts(total=len(tasks), active=len(tasks) - completed, completed=completed)


def items_left_label(active: int) -> str:
    """Footer label for the number of open tasks."""
    noun = "item" if active == 1 else "items"
    return f"{active} {noun} left"


def is_overdue(task: Task, today: date | None = None) -> bool:
    """Return True if an open task's due date has passed."""
    if task.completed or task.due_date is None:
        return False
    if today is None:
        today = date.today()
    return task.due_date < today


def visible_tasks(state: StoreState, combine: bool = False) -> list[Task]:
    """Filter then sort the collection for the current view state."""
    return sort_tasks(filter_tasks(state.tasks, state.status_filter, state.search, combine))
