"""Rich rendering of the task view."""

from __future__ import annotations

from datetime import date

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from taskpad.config import TaskpadConfig
from taskpad.derive import TaskCounts, counts, is_overdue, items_left_label, visible_tasks
from taskpad.models import StatusFilter, Task
from taskpad.store import StoreState

PRIORITY_STYLE = {"high": "red", "medium": "yellow", "low": "green"}

_TABS: tuple[tuple[StatusFilter, str], ...] = (
    ("all", "All"),
    ("active", "Active"),
    ("completed", "Completed"),
)


def filter_tabs(totals: TaskCounts, active: StatusFilter) -> str:
    """Markup for the filter selector, each tab labelled with its count."""
    numbers = {"all": totals.total, "active": totals.active, "completed": totals.completed}
    parts = []
    for key, label in _TABS:
        text = f"{label} ({numbers[key]})"
        if key == active:
            parts.append(f"[bold reverse] {text} [/bold reverse]")
        else:
            parts.append(f"[dim] {text} [/dim]")
    return " ".join(parts)


def _due_cell(task: Task, today: date, date_format: str) -> str:
    if task.due_date is None:
        return ""
    cell = task.due_date.strftime(date_format)
    if is_overdue(task, today):
        cell += " [red](overdue)[/red]"
    return cell


def render_view(
    console: Console,
    state: StoreState,
    config: TaskpadConfig,
    combine: bool = False,
    today: date | None = None,
) -> None:
    """Print filter tabs, the filtered and sorted tasks, and the footer."""
    if today is None:
        today = date.today()

    view = visible_tasks(state, combine)
    totals = counts(state.tasks)

    console.print(filter_tabs(totals, state.status_filter))
    if state.search:
        console.print(f"[dim]Search:[/dim] {escape(state.search)}")

    if not view:
        console.print("[dim]No tasks found.[/dim]")
    else:
        table = Table(show_header=True)
        if config.display.show_ids:
            table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("", width=1, no_wrap=True)
        table.add_column("Task", overflow="fold")
        table.add_column("Priority", no_wrap=True)
        table.add_column("Due", no_wrap=True)

        for task in view:
            mark = "[green]✓[/green]" if task.completed else "○"
            text = escape(task.text) if task.text else "[dim]<empty>[/dim]"
            if task.completed:
                text = f"[strike dim]{text}[/strike dim]"
            if state.editing_id == task.id:
                text += " [magenta](editing)[/magenta]"
            style = PRIORITY_STYLE[task.priority]
            row = [
                mark,
                text,
                f"[{style}]{task.priority}[/{style}]",
                _due_cell(task, today, config.display.date_format),
            ]
            if config.display.show_ids:
                row.insert(0, str(task.id))
            table.add_row(*row)

        console.print(table)

    if state.tasks:
        console.print(f"[dim]{items_left_label(totals.active)}[/dim]")
