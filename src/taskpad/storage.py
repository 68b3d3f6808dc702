"""Persistence for the task collection.

The whole collection lives in one named slot of a key-value byte store and
is overwritten on every accepted mutation. There is no versioning and no
migration: last write wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from taskpad.models import Task

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "todos"

_TASK_LIST = TypeAdapter(list[Task])


class StorageError(Exception):
    """Raised when the task slot cannot be written."""


def check_slot_name(slot: str) -> str:
    """Return ``slot`` if it can name a file in the slot directory.

    Raises ValueError for empty names, path separators and dot entries.
    """
    if not slot or slot in (".", "..") or "/" in slot or os.sep in slot:
        raise ValueError(f"Invalid slot name: {slot!r}")
    return slot


class SlotStore:
    """A key-value store of named byte slots."""

    def read(self, slot: str) -> bytes | None:
        """Return the slot's content, or None if the slot is absent."""
        raise NotImplementedError

    def write(self, slot: str, data: bytes) -> None:
        """Replace the slot's content."""
        raise NotImplementedError

    def delete(self, slot: str) -> None:
        """Remove the slot if it exists."""
        raise NotImplementedError


class MemorySlotStore(SlotStore):
    """Slot store held in a dict."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.slots: dict[str, bytes] = dict(initial or {})

    def read(self, slot: str) -> bytes | None:
        return self.slots.get(slot)

    def write(self, slot: str, data: bytes) -> None:
        self.slots[slot] = bytes(data)

    def delete(self, slot: str) -> None:
        self.slots.pop(slot, None)


class FileSlotStore(SlotStore):
    """Slot store backed by one JSON file per slot in a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, slot: str) -> Path:
        """Return the file path for a slot name."""
        return self.directory / f"{check_slot_name(slot)}.json"

    def read(self, slot: str) -> bytes | None:
        path = self.path_for(slot)
        if not path.exists():
            return None
        return path.read_bytes()

    def write(self, slot: str, data: bytes) -> None:
        path = self.path_for(slot)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write beside the target then swap it in, so readers never see half a slot
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{slot}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, slot: str) -> None:
        self.path_for(slot).unlink(missing_ok=True)


class TaskRepository:
    """Load and save the task collection in a single slot."""

    def __init__(self, slots: SlotStore, slot: str = DEFAULT_SLOT) -> None:
        self.slots = slots
        self.slot = slot

    def load(self) -> tuple[Task, ...]:
        """Load the saved collection.

        An absent or unreadable slot yields an empty collection; the failure
        is logged and never raised. An invalid slot name raises ValueError.
        """
        check_slot_name(self.slot)
        try:
            raw = self.slots.read(self.slot)
            if raw is None:
                logger.debug("No saved tasks in slot %s", self.slot)
                return ()
            tasks = _TASK_LIST.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable task slot %s: %s", self.slot, e)
            return ()

        logger.debug("Loaded %d tasks from slot %s", len(tasks), self.slot)
        return tuple(tasks)

    def save(self, tasks: Iterable[Task]) -> None:
        """Overwrite the slot with the full collection."""
        items = list(tasks)
        payload = _TASK_LIST.dump_python(items, mode="json", by_alias=True)
        data = json.dumps(payload, indent=2).encode("utf-8")

        try:
            self.slots.write(self.slot, data)
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not save tasks to slot {self.slot!r}: {e}") from e

        logger.debug("Saved %d tasks to slot %s", len(items), self.slot)
