"""Task records and draft holders for taskpad.

Field names are snake_case in Python; the persisted layout uses the
camelCase keys ``dueDate`` and ``createdAt`` via aliases.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["high", "medium", "low"]
StatusFilter = Literal["all", "active", "completed"]

PRIORITIES: tuple[Priority, ...] = ("high", "medium", "low")
STATUS_FILTERS: tuple[StatusFilter, ...] = ("all", "active", "completed")


class Task(BaseModel):
    """A single task on the list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    text: str
    completed: bool = False
    due_date: date | None = Field(default=None, alias="dueDate")
    priority: Priority = "medium"
    created_at: datetime = Field(alias="createdAt")


class AddDraft(BaseModel):
    """Values for the task about to be added."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    due_date: date | None = None
    priority: Priority = "medium"


class EditDraft(BaseModel):
    """Values for the task currently being edited."""

    model_config = ConfigDict(frozen=True)

    task_id: int
    text: str
    due_date: date | None = None
    priority: Priority = "medium"

    @classmethod
    def from_task(cls, task: Task) -> EditDraft:
        """Seed an edit draft from a task's current values."""
        return cls(
            task_id=task.id,
            text=task.text,
            due_date=task.due_date,
            priority=task.priority,
        )


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class IdSource:
    """Issue time-derived task ids that never repeat within a process.

    Ids are milliseconds since the epoch. When the clock has not advanced
    past the last issued (or observed) id, the next id is last + 1.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def observe(self, ids: Iterable[int]) -> None:
        """Account for ids that already exist, e.g. loaded from storage."""
        for task_id in ids:
            if task_id > self._last:
                self._last = task_id

    def __call__(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate
