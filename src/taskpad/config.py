"""Configuration models for taskpad."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from taskpad.storage import DEFAULT_SLOT, check_slot_name


class StorageConfig(BaseModel):
    """Configuration for the task slot store."""

    directory: str | None = None
    """Where slot files live. Defaults to the data directory."""
    slot: str = DEFAULT_SLOT

    @field_validator("slot")
    @classmethod
    def _valid_slot(cls, value: str) -> str:
        return check_slot_name(value)


class FilterConfig(BaseModel):
    """Configuration for the list view filter."""

    default: Literal["all", "active", "completed"] = "all"
    combine_search: bool = False
    """Intersect the status filter with the search term instead of layering them."""


class EditConfig(BaseModel):
    """Configuration for editing tasks."""

    reject_empty_text: bool = False


class DisplayConfig(BaseModel):
    """Configuration for rendering tasks."""

    show_ids: bool = True
    date_format: str = "%Y-%m-%d"


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: str | None = None


class TaskpadConfig(BaseModel):
    """Main configuration for taskpad."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    edit: EditConfig = Field(default_factory=EditConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> TaskpadConfig:
        """Load configuration from file or return defaults."""
        if path is None:
            path = CONFIG_FILE

        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        return cls.model_validate(data)

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_FILE

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(exclude_none=True), f, indent=2)

    def slot_directory(self, data_dir: Path) -> Path:
        """Return the directory holding task slots."""
        if self.storage.directory:
            return Path(self.storage.directory)
        return data_dir


def resolve_data_dir(override: str | Path | None = None) -> Path:
    """Resolve the data directory.

    Priority: explicit override > TASKPAD_DIR environment variable > default.
    """
    if override:
        return Path(override)
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return TASKPAD_DIR


# Default data directory
DATA_DIR_ENV = "TASKPAD_DIR"
TASKPAD_DIR = Path(".taskpad")
CONFIG_FILE = TASKPAD_DIR / "config.json"
