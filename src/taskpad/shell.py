"""Interactive shell over a task store.

The view is redrawn before every prompt. The add form and the edit form
keep separate drafts: ``due`` and ``pri`` change the edit draft while an
edit is open and the add draft otherwise.
"""

from __future__ import annotations

import logging
from datetime import date

import click
from rich.console import Console
from rich.markup import escape

from taskpad.config import TaskpadConfig
from taskpad.display import render_view
from taskpad.models import PRIORITIES, STATUS_FILTERS
from taskpad.storage import StorageError
from taskpad.store import TaskStore

logger = logging.getLogger(__name__)

HELP_TEXT = """\
[bold]Commands:[/bold]
  add <text>             Add a task using the pending due date and priority
  due <YYYY-MM-DD|none>  Set the due date for the next add (or the open edit)
  pri <high|medium|low>  Set the priority for the next add (or the open edit)
  edit <id>              Start editing a task
  text <new text>        Change the text of the open edit
  save                   Save the open edit
  cancel                 Discard the open edit
  toggle <id>            Mark a task done / not done
  rm <id>                Delete a task
  clear                  Delete all completed tasks
  delete-all             Delete every task (asks first)
  filter <all|active|completed>
  search [text]          Search task text (no text clears the search)
  combine                Toggle applying filter and search together
  help                   Show this help
  exit                   Leave the shell"""


def _parse_id(raw: str) -> int | None:
    raw = raw.strip().rstrip(".")
    return int(raw) if raw.isdigit() else None


def _parse_due(raw: str) -> date | None:
    """Parse a due date; 'none' or '' clears it. Raises ValueError if invalid."""
    raw = raw.strip()
    if raw.lower() in ("", "none", "-"):
        return None
    return date.fromisoformat(raw)


class Shell:
    """Read-eval-print loop translating typed commands into store operations."""

    def __init__(self, store: TaskStore, config: TaskpadConfig, console: Console) -> None:
        self.store = store
        self.config = config
        self.console = console
        self.combine = config.filters.combine_search

    def run(self) -> None:
        """Loop until exit, end of input or interrupt."""
        while True:
            if self.console.is_terminal:
                self.console.clear()
            render_view(self.console, self.store.state, self.config, self.combine)
            self._print_drafts()

            try:
                line = self.console.input("\n: ").strip()
            except (EOFError, KeyboardInterrupt):
                self.console.print("\nGoodbye.")
                return

            if not line:
                continue
            if line.lower() in ("exit", "quit"):
                self.console.print("Goodbye.")
                return

            try:
                self.handle(line)
            except StorageError as e:
                logger.error("Save failed: %s", e)
                self.console.print(f"[red]Error:[/red] {escape(str(e))}")

    def _print_drafts(self) -> None:
        state = self.store.state
        if state.edit_draft is not None:
            draft = state.edit_draft
            due = draft.due_date.isoformat() if draft.due_date else "none"
            self.console.print(
                f"[magenta]Editing {draft.task_id}:[/magenta] {escape(draft.text)} "
                f"[dim](priority {draft.priority}, due {due})[/dim]"
            )
        else:
            draft = state.add_draft
            due = draft.due_date.isoformat() if draft.due_date else "none"
            self.console.print(f"[dim]Next add: priority {draft.priority}, due {due}[/dim]")

    # -------------------- command dispatch --------------------

    def handle(self, line: str) -> None:
        """Run one command line."""
        cmd, _, arg = line.partition(" ")
        cmd = cmd.lower()
        arg = arg.strip()

        if cmd == "help":
            self.console.print(HELP_TEXT)
            try:
                self.console.input("\nPress Enter to return...")
            except (EOFError, KeyboardInterrupt):
                self.console.print()
        elif cmd == "add":
            self._cmd_add(arg)
        elif cmd == "due":
            self._cmd_due(arg)
        elif cmd in ("pri", "priority"):
            self._cmd_priority(arg)
        elif cmd == "edit":
            self._with_id(arg, self.store.begin_edit)
        elif cmd == "text":
            if self.store.state.edit_draft is None:
                self._warn("No edit in progress.")
            else:
                self.store.set_edit_draft(text=arg)
        elif cmd == "save":
            self._cmd_save()
        elif cmd == "cancel":
            self.store.cancel_edit()
        elif cmd in ("toggle", "t"):
            self._with_id(arg, self.store.toggle_completed)
        elif cmd in ("rm", "delete"):
            self._with_id(arg, self.store.delete)
        elif cmd == "clear":
            if not self.store.clear_completed():
                self._warn("No completed tasks to clear.")
        elif cmd == "delete-all":
            if click.confirm("Are you sure you want to delete all tasks?", default=False):
                self.store.delete_all()
        elif cmd == "filter":
            if arg not in STATUS_FILTERS:
                self._warn(f"Filter must be one of: {', '.join(STATUS_FILTERS)}")
            else:
                self.store.set_filter(arg)  # type: ignore[arg-type]
        elif cmd == "search":
            self.store.set_search(arg)
        elif cmd == "combine":
            self.combine = not self.combine
        else:
            self._warn("Unknown command. Type 'help' for instructions.")

    # ---- individual command helpers ----

    def _warn(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def _with_id(self, arg: str, operation) -> None:
        task_id = _parse_id(arg)
        if task_id is None:
            self._warn("Invalid id.")
            return
        if not operation(task_id):
            self._warn(f"Task {task_id} not found.")

    def _cmd_add(self, text: str) -> None:
        self.store.set_add_draft(text=text)
        if self.store.add_from_draft() is None:
            self._warn("Task text cannot be empty.")

    def _cmd_due(self, arg: str) -> None:
        try:
            due = _parse_due(arg)
        except ValueError:
            self._warn("Invalid date. Use YYYY-MM-DD or 'none'.")
            return
        if self.store.state.edit_draft is not None:
            self.store.set_edit_draft(due_date=due)
        else:
            self.store.set_add_draft(due_date=due)

    def _cmd_priority(self, arg: str) -> None:
        priority = arg.lower()
        if priority not in PRIORITIES:
            self._warn(f"Priority must be one of: {', '.join(PRIORITIES)}")
            return
        if self.store.state.edit_draft is not None:
            self.store.set_edit_draft(priority=priority)
        else:
            self.store.set_add_draft(priority=priority)

    def _cmd_save(self) -> None:
        editing = self.store.state.editing_id
        if editing is None:
            self._warn("No edit in progress.")
            return
        if not self.store.commit_edit(editing):
            self._warn("Task text cannot be empty.")
