"""Task store: immutable state snapshots and the operations over them.

Each operation is a pure function taking a ``StoreState`` and returning the
next one. A request that does not apply (unknown id, empty text, nothing to
clear) returns the very same state object. ``TaskStore`` holds the current
snapshot and runs its effects, such as saving, whenever the task collection
changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from taskpad.models import (
    AddDraft,
    EditDraft,
    IdSource,
    Priority,
    StatusFilter,
    Task,
    utc_now,
)

logger = logging.getLogger(__name__)

Effect = Callable[[tuple[Task, ...]], None]

# Marks a draft field as "leave unchanged", since None is a valid due date
UNSET: object = object()


class StoreState(BaseModel):
    """One snapshot of the task collection plus transient view state."""

    model_config = ConfigDict(frozen=True)

    tasks: tuple[Task, ...] = ()
    status_filter: StatusFilter = "all"
    search: str = ""
    add_draft: AddDraft = Field(default_factory=AddDraft)
    edit_draft: EditDraft | None = None

    def find(self, task_id: int) -> Task | None:
        """Return the task with the given id, if any."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    @property
    def editing_id(self) -> int | None:
        """Id of the task being edited, or None."""
        return self.edit_draft.task_id if self.edit_draft else None


def _replace_task(state: StoreState, task: Task) -> tuple[Task, ...]:
    return tuple(task if t.id == task.id else t for t in state.tasks)


def _draft_update(text: object, due_date: object, priority: object) -> dict:
    update = {}
    if text is not UNSET:
        update["text"] = text
    if due_date is not UNSET:
        update["due_date"] = due_date
    if priority is not UNSET:
        update["priority"] = priority
    return update


# ---- task collection ----


def add(
    state: StoreState,
    text: str,
    due_date: date | None = None,
    priority: Priority = "medium",
    *,
    task_id: int,
    created_at: datetime,
) -> StoreState:
    """Append a new open task and reset the add draft.

    Text is trimmed; empty text adds nothing.
    """
    cleaned = text.strip()
    if not cleaned:
        logger.debug("Rejected add with empty text")
        return state

    task = Task(
        id=task_id,
        text=cleaned,
        completed=False,
        due_date=due_date,
        priority=priority,
        created_at=created_at,
    )
    logger.debug("Added task %d", task.id)
    return state.model_copy(update={"tasks": state.tasks + (task,), "add_draft": AddDraft()})


def toggle_completed(state: StoreState, task_id: int) -> StoreState:
    """Flip a task's completed flag."""
    task = state.find(task_id)
    if task is None:
        logger.debug("Toggle ignored, no task %d", task_id)
        return state

    updated = task.model_copy(update={"completed": not task.completed})
    return state.model_copy(update={"tasks": _replace_task(state, updated)})


def delete(state: StoreState, task_id: int) -> StoreState:
    """Remove one task."""
    if state.find(task_id) is None:
        logger.debug("Delete ignored, no task %d", task_id)
        return state

    update: dict = {"tasks": tuple(t for t in state.tasks if t.id != task_id)}
    if state.editing_id == task_id:
        update["edit_draft"] = None
    return state.model_copy(update=update)


def clear_completed(state: StoreState) -> StoreState:
    """Remove every completed task."""
    remaining = tuple(t for t in state.tasks if not t.completed)
    if len(remaining) == len(state.tasks):
        return state

    update: dict = {"tasks": remaining}
    editing = state.editing_id
    if editing is not None and not any(t.id == editing for t in remaining):
        update["edit_draft"] = None
    return state.model_copy(update=update)


def delete_all(state: StoreState) -> StoreState:
    """Remove every task.

    Callers are expected to have confirmed the request with the user.
    """
    if not state.tasks:
        return state
    return state.model_copy(update={"tasks": (), "edit_draft": None})


# ---- editing ----


def begin_edit(state: StoreState, task_id: int) -> StoreState:
    """Make a task the edit target, seeding the edit draft from it."""
    task = state.find(task_id)
    if task is None:
        logger.debug("Edit ignored, no task %d", task_id)
        return state
    return state.model_copy(update={"edit_draft": EditDraft.from_task(task)})


def set_edit_draft(
    state: StoreState,
    text: object = UNSET,
    due_date: object = UNSET,
    priority: object = UNSET,
) -> StoreState:
    """Change the pending edit's values. Ignored when nothing is being edited."""
    if state.edit_draft is None:
        return state
    draft = EditDraft.model_validate(
        {**state.edit_draft.model_dump(), **_draft_update(text, due_date, priority)}
    )
    return state.model_copy(update={"edit_draft": draft})


def commit_edit(state: StoreState, task_id: int, reject_empty_text: bool = False) -> StoreState:
    """Write the edit draft onto its task and end the edit.

    The draft text is saved as is, even when empty, unless
    ``reject_empty_text`` is set; then an empty commit is ignored and the
    edit stays open.
    """
    draft = state.edit_draft
    if draft is None or draft.task_id != task_id:
        logger.debug("Commit ignored, task %d is not being edited", task_id)
        return state

    task = state.find(task_id)
    if task is None:
        return state

    if reject_empty_text and not draft.text.strip():
        logger.debug("Rejected commit of empty text for task %d", task_id)
        return state

    updated = task.model_copy(
        update={"text": draft.text, "due_date": draft.due_date, "priority": draft.priority}
    )
    return state.model_copy(update={"tasks": _replace_task(state, updated), "edit_draft": None})


def cancel_edit(state: StoreState) -> StoreState:
    """End the edit without touching any task."""
    if state.edit_draft is None:
        return state
    return state.model_copy(update={"edit_draft": None})


# ---- view state ----


def set_add_draft(
    state: StoreState,
    text: object = UNSET,
    due_date: object = UNSET,
    priority: object = UNSET,
) -> StoreState:
    """Change the values for the next add."""
    draft = AddDraft.model_validate(
        {**state.add_draft.model_dump(), **_draft_update(text, due_date, priority)}
    )
    return state.model_copy(update={"add_draft": draft})


def set_filter(state: StoreState, status_filter: StatusFilter) -> StoreState:
    """Select which tasks the view shows by status."""
    return state.model_copy(update={"status_filter": status_filter})


def set_search(state: StoreState, search: str) -> StoreState:
    """Set the free-text search term."""
    return state.model_copy(update={"search": search})


class TaskStore:
    """Holds the current state and applies operations to it.

    Effects run for any operation that changes the task collection, with
    the full new collection, before the new state is adopted. If an effect
    raises, the state is left as it was. Changes to drafts, filter or search
    never run effects.
    """

    def __init__(
        self,
        tasks: tuple[Task, ...] = (),
        *,
        id_source: IdSource | None = None,
        clock: Callable[[], datetime] = utc_now,
        reject_empty_text: bool = False,
        status_filter: StatusFilter = "all",
    ) -> None:
        self._state = StoreState(tasks=tuple(tasks), status_filter=status_filter)
        self._ids = id_source or IdSource()
        self._ids.observe(t.id for t in self._state.tasks)
        self._clock = clock
        self._effects: list[Effect] = []
        self.reject_empty_text = reject_empty_text

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._state.tasks

    def subscribe(self, effect: Effect) -> None:
        """Run ``effect`` after every change to the task collection."""
        self._effects.append(effect)

    def _apply(self, new_state: StoreState) -> bool:
        old_state = self._state
        # A failing effect leaves the current state untouched
        if new_state.tasks != old_state.tasks:
            for effect in self._effects:
                effect(new_state.tasks)
        self._state = new_state
        return new_state is not old_state

    # ---- operations ----

    def add(
        self,
        text: str,
        due_date: date | None = None,
        priority: Priority = "medium",
    ) -> Task | None:
        """Add a task; returns it, or None when the text was empty."""
        if not text.strip():
            logger.debug("Rejected add with empty text")
            return None
        new_state = add(
            self._state,
            text,
            due_date,
            priority,
            task_id=self._ids(),
            created_at=self._clock(),
        )
        self._apply(new_state)
        return new_state.tasks[-1]

    def add_from_draft(self) -> Task | None:
        """Add a task from the add draft."""
        draft = self._state.add_draft
        return self.add(draft.text, draft.due_date, draft.priority)

    def set_add_draft(self, text=UNSET, due_date=UNSET, priority=UNSET) -> bool:
        return self._apply(set_add_draft(self._state, text, due_date, priority))

    def begin_edit(self, task_id: int) -> bool:
        return self._apply(begin_edit(self._state, task_id))

    def set_edit_draft(self, text=UNSET, due_date=UNSET, priority=UNSET) -> bool:
        return self._apply(set_edit_draft(self._state, text, due_date, priority))

    def commit_edit(self, task_id: int) -> bool:
        return self._apply(commit_edit(self._state, task_id, self.reject_empty_text))

    def cancel_edit(self) -> bool:
        return self._apply(cancel_edit(self._state))

    def toggle_completed(self, task_id: int) -> bool:
        return self._apply(toggle_completed(self._state, task_id))

    def delete(self, task_id: int) -> bool:
        return self._apply(delete(self._state, task_id))

    def clear_completed(self) -> bool:
        return self._apply(clear_completed(self._state))

    def delete_all(self) -> bool:
        return self._apply(delete_all(self._state))

    def set_filter(self, status_filter: StatusFilter) -> bool:
        return self._apply(set_filter(self._state, status_filter))

    def set_search(self, search: str) -> bool:
        return self._apply(set_search(self._state, search))
