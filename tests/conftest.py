"""Shared fixtures for taskpad tests."""

from __future__ import annotations

import json
import os
from collections.abc import Generator
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from taskpad.models import Task


@pytest.fixture(autouse=True)
def _no_env_data_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's TASKPAD_DIR out of the tests."""
    monkeypatch.delenv("TASKPAD_DIR", raising=False)


@pytest.fixture
def temp_project(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory and change to it."""
    original_dir = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_dir)


@pytest.fixture
def temp_taskpad_dir(temp_project: Path) -> Path:
    """Create a temporary .taskpad directory."""
    taskpad_dir = temp_project / ".taskpad"
    taskpad_dir.mkdir()
    return taskpad_dir


@pytest.fixture
def sample_tasks() -> list[Task]:
    """Three tasks: low open, high open, medium completed."""
    return [
        Task(
            id=1,
            text="Water plants",
            priority="low",
            created_at=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        ),
        Task(
            id=2,
            text="Buy milk",
            priority="high",
            due_date=date(2024, 1, 5),
            created_at=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
        ),
        Task(
            id=3,
            text="File taxes",
            priority="medium",
            completed=True,
            created_at=datetime(2024, 1, 1, 11, 0, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def sample_slot_data() -> list[dict]:
    """Sample persisted slot content."""
    return [
        {
            "id": 1704067200000,
            "text": "Buy milk",
            "completed": False,
            "dueDate": "2024-01-01",
            "priority": "high",
            "createdAt": "2024-01-01T09:30:00.123000Z",
        },
        {
            "id": 1704067200001,
            "text": "Walk the dog",
            "completed": True,
            "dueDate": None,
            "priority": "low",
            "createdAt": "2024-01-01T09:31:00Z",
        },
    ]


@pytest.fixture
def saved_tasks(temp_taskpad_dir: Path, sample_slot_data: list[dict]) -> Path:
    """Write sample tasks to the default slot file."""
    slot_path = temp_taskpad_dir / "todos.json"
    slot_path.write_text(json.dumps(sample_slot_data))
    return slot_path
