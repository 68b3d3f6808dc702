"""Tests for taskpad.shell module."""

from __future__ import annotations

import io
from datetime import date
from unittest.mock import patch

import pytest
from rich.console import Console

from taskpad.config import FilterConfig, TaskpadConfig
from taskpad.models import Task
from taskpad.shell import Shell, _parse_due, _parse_id
from taskpad.storage import StorageError
from taskpad.store import TaskStore


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def shell(sample_tasks: list[Task], output: io.StringIO) -> Shell:
    """Shell over the sample tasks writing to a string buffer."""
    console = Console(file=output, width=120)
    return Shell(TaskStore(tuple(sample_tasks)), TaskpadConfig(), console)


class TestParsers:
    """Tests for argument parsing helpers."""

    def test_parse_id(self) -> None:
        """Test ids are digits with an optional trailing dot."""
        assert _parse_id("12") == 12
        assert _parse_id("12.") == 12
        assert _parse_id("abc") is None
        assert _parse_id("") is None

    def test_parse_due(self) -> None:
        """Test due dates parse and 'none' clears."""
        assert _parse_due("2024-03-01") == date(2024, 3, 1)
        assert _parse_due("none") is None
        assert _parse_due("") is None
        with pytest.raises(ValueError):
            _parse_due("tomorrow")


class TestShellCommands:
    """Tests for Shell.handle."""

    def test_add_uses_add_draft(self, shell: Shell) -> None:
        """Test due and pri set the next add."""
        shell.handle("due 2024-05-05")
        shell.handle("pri low")
        shell.handle("add Call the bank")

        task = shell.store.tasks[-1]
        assert task.text == "Call the bank"
        assert task.due_date == date(2024, 5, 5)
        assert task.priority == "low"
        assert shell.store.state.add_draft.priority == "medium"

    def test_add_empty(self, shell: Shell, output: io.StringIO) -> None:
        """Test adding nothing warns and changes nothing."""
        shell.handle("add")
        assert len(shell.store.tasks) == 3
        assert "cannot be empty" in output.getvalue()

    def test_edit_flow(self, shell: Shell) -> None:
        """Test edit, change fields and save."""
        shell.handle("edit 1")
        shell.handle("text Water the garden")
        shell.handle("pri high")
        shell.handle("due none")
        shell.handle("save")

        task = shell.store.state.find(1)
        assert task is not None
        assert task.text == "Water the garden"
        assert task.priority == "high"
        assert shell.store.state.edit_draft is None

    def test_edit_does_not_touch_add_draft(self, shell: Shell) -> None:
        """Test due and pri during an edit go to the edit draft."""
        shell.handle("pri low")
        shell.handle("edit 2")
        shell.handle("pri medium")
        shell.handle("cancel")

        assert shell.store.state.add_draft.priority == "low"
        task = shell.store.state.find(2)
        assert task is not None
        assert task.priority == "high"

    def test_save_without_edit(self, shell: Shell, output: io.StringIO) -> None:
        """Test save with no open edit warns."""
        shell.handle("save")
        assert "No edit in progress" in output.getvalue()

    def test_toggle_and_rm(self, shell: Shell, output: io.StringIO) -> None:
        """Test toggling and deleting by id."""
        shell.handle("toggle 1")
        task = shell.store.state.find(1)
        assert task is not None and task.completed

        shell.handle("rm 1")
        assert shell.store.state.find(1) is None

        shell.handle("rm 99")
        assert "Task 99 not found" in output.getvalue()

    def test_invalid_id(self, shell: Shell, output: io.StringIO) -> None:
        """Test non-numeric ids warn."""
        shell.handle("toggle abc")
        assert "Invalid id" in output.getvalue()

    def test_clear(self, shell: Shell) -> None:
        """Test clear removes completed tasks."""
        shell.handle("clear")
        assert [t.id for t in shell.store.tasks] == [1, 2]

    def test_delete_all_confirmed(self, shell: Shell) -> None:
        """Test delete-all runs after confirmation."""
        with patch("taskpad.shell.click.confirm", return_value=True):
            shell.handle("delete-all")
        assert shell.store.tasks == ()

    def test_delete_all_declined(self, shell: Shell) -> None:
        """Test delete-all does nothing when declined."""
        with patch("taskpad.shell.click.confirm", return_value=False):
            shell.handle("delete-all")
        assert len(shell.store.tasks) == 3

    def test_filter_and_search(self, shell: Shell, output: io.StringIO) -> None:
        """Test filter and search set view state."""
        shell.handle("filter active")
        shell.handle("search milk")
        assert shell.store.state.status_filter == "active"
        assert shell.store.state.search == "milk"

        shell.handle("filter archived")
        assert "Filter must be one of" in output.getvalue()

    def test_combine_toggle(self, sample_tasks: list[Task], output: io.StringIO) -> None:
        """Test combine flips the configured default."""
        config = TaskpadConfig(filters=FilterConfig(combine_search=True))
        shell = Shell(TaskStore(tuple(sample_tasks)), config, Console(file=output))
        assert shell.combine is True
        shell.handle("combine")
        assert shell.combine is False

    def test_unknown_command(self, shell: Shell, output: io.StringIO) -> None:
        """Test unknown commands point to help."""
        shell.handle("frobnicate")
        assert "Unknown command" in output.getvalue()


class TestShellRun:
    """Tests for Shell.run."""

    def test_run_renders_and_exits(self, shell: Shell, output: io.StringIO) -> None:
        """Test the loop draws the view and stops on exit."""
        with patch.object(shell.console, "input", side_effect=["filter completed", "exit"]):
            shell.run()
        text = output.getvalue()
        assert "Buy milk" in text
        assert "Completed (1)" in text
        assert "Goodbye" in text

    def test_help_pause_survives_end_of_input(self, shell: Shell, output: io.StringIO) -> None:
        """Test end of input at the help pause returns to the loop."""
        with patch.object(shell.console, "input", side_effect=["help", EOFError, EOFError]):
            shell.run()
        text = output.getvalue()
        assert "Commands:" in text
        assert "Goodbye" in text

    def test_run_stops_on_eof(self, shell: Shell, output: io.StringIO) -> None:
        """Test end of input ends the loop."""
        with patch.object(shell.console, "input", side_effect=EOFError):
            shell.run()
        assert "Goodbye" in output.getvalue()

    def test_run_reports_storage_error(self, shell: Shell, output: io.StringIO) -> None:
        """Test a failed save is reported and the loop continues."""

        def fail(tasks: tuple[Task, ...]) -> None:
            raise StorageError("disk full")

        shell.store.subscribe(fail)
        with patch.object(shell.console, "input", side_effect=["toggle 1", "exit"]):
            shell.run()
        assert "disk full" in output.getvalue()
        task = shell.store.state.find(1)
        assert task is not None and not task.completed
