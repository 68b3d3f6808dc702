"""CLI interface for taskpad."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from taskpad import __version__
from taskpad.config import TaskpadConfig, resolve_data_dir
from taskpad.logging_setup import setup_logging
from taskpad.models import PRIORITIES, STATUS_FILTERS
from taskpad.storage import FileSlotStore, StorageError, TaskRepository
from taskpad.store import TaskStore

console = Console()

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


class TaskpadGroup(click.Group):
    """Command group that reports save failures instead of a traceback."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except StorageError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            ctx.exit(1)


def open_store(config: TaskpadConfig, data_dir: Path) -> TaskStore:
    """Load the saved tasks and return a store that saves on every change."""
    repository = TaskRepository(
        FileSlotStore(config.slot_directory(data_dir)),
        slot=config.storage.slot,
    )
    store = TaskStore(
        repository.load(),
        reject_empty_text=config.edit.reject_empty_text,
        status_filter=config.filters.default,
    )
    store.subscribe(repository.save)
    return store


def _as_date(value: datetime | None):
    return value.date() if value else None


@click.group(cls=TaskpadGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="taskpad")
@click.option(
    "--data-dir",
    "-d",
    type=click.Path(file_okay=False),
    help="Directory for tasks and config (default: $TASKPAD_DIR or .taskpad)",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, data_dir: str | None, config_path: str | None, verbose: bool) -> None:
    """taskpad - a single-user task list.

    \b
    Examples:
      taskpad add Buy milk --due 2024-01-01 -p high
      taskpad list --filter active
      taskpad toggle 1704067200000
      taskpad shell
    """
    ctx.ensure_object(dict)

    data_path = resolve_data_dir(data_dir)
    cfg_path = Path(config_path) if config_path else data_path / "config.json"

    try:
        config = TaskpadConfig.load(cfg_path)
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Invalid config[/red] {cfg_path}: {escape(str(e))}")
        ctx.exit(1)

    setup_logging("DEBUG" if verbose else config.logging.level, config.logging.file)

    ctx.obj["config"] = config
    ctx.obj["data_dir"] = data_path
    ctx.obj["store"] = open_store(config, data_path)

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("text", nargs=-1, required=True)
@click.option("--due", type=DATE_TYPE, help="Due date (YYYY-MM-DD)")
@click.option(
    "--priority",
    "-p",
    type=click.Choice(PRIORITIES),
    default="medium",
    show_default=True,
    help="Task priority",
)
@click.pass_context
def add(ctx: click.Context, text: tuple[str, ...], due: datetime | None, priority: str) -> None:
    """Add a task.

    \b
    Example:
      taskpad add Buy milk --due 2024-01-01 --priority high
    """
    store: TaskStore = ctx.obj["store"]

    task = store.add(" ".join(text), _as_date(due), priority)  # type: ignore[arg-type]

    if task is None:
        console.print("[red]Task text cannot be empty.[/red]")
        return

    console.print(f"[green]Added task:[/green] {task.id} {escape(task.text)}")


@main.command("list")
@click.option("--filter", "-f", "status_filter", type=click.Choice(STATUS_FILTERS), help="Status filter")
@click.option("--search", "-s", default="", help="Only tasks whose text contains this")
@click.option(
    "--combine/--no-combine",
    default=None,
    help="Apply status filter and search together (default from config)",
)
@click.pass_context
def list_command(
    ctx: click.Context,
    status_filter: str | None,
    search: str,
    combine: bool | None,
) -> None:
    """Show tasks, open and most important first.

    With a status filter other than "all", the search term is ignored
    unless --combine is given.
    """
    from taskpad.display import render_view

    config: TaskpadConfig = ctx.obj["config"]
    store: TaskStore = ctx.obj["store"]

    if status_filter:
        store.set_filter(status_filter)  # type: ignore[arg-type]
    store.set_search(search)

    if combine is None:
        combine = config.filters.combine_search

    render_view(console, store.state, config, combine)


@main.command()
@click.argument("task_id", type=int)
@click.option("--text", "-t", help="New task text")
@click.option("--due", type=DATE_TYPE, help="New due date (YYYY-MM-DD)")
@click.option("--no-due", is_flag=True, help="Remove the due date")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), help="New priority")
@click.pass_context
def edit(
    ctx: click.Context,
    task_id: int,
    text: str | None,
    due: datetime | None,
    no_due: bool,
    priority: str | None,
) -> None:
    """Edit a task's text, due date or priority."""
    store: TaskStore = ctx.obj["store"]

    if due and no_due:
        console.print("[red]Use either --due or --no-due, not both.[/red]")
        return

    if not store.begin_edit(task_id):
        console.print(f"[red]Task not found:[/red] {task_id}")
        return

    changes: dict = {}
    if text is not None:
        changes["text"] = text
    if due:
        changes["due_date"] = due.date()
    elif no_due:
        changes["due_date"] = None
    if priority:
        changes["priority"] = priority
    store.set_edit_draft(**changes)

    if not store.commit_edit(task_id):
        store.cancel_edit()
        console.print("[red]Task text cannot be empty.[/red]")
        return

    console.print(f"[green]Task updated:[/green] {task_id}")


@main.command()
@click.argument("task_id", type=int)
@click.pass_context
def toggle(ctx: click.Context, task_id: int) -> None:
    """Mark a task done, or open again if already done."""
    store: TaskStore = ctx.obj["store"]

    if not store.toggle_completed(task_id):
        console.print(f"[red]Task not found:[/red] {task_id}")
        return

    task = store.state.find(task_id)
    if task is not None and task.completed:
        console.print(f"[green]Task completed:[/green] {task_id}")
    else:
        console.print(f"[green]Task reopened:[/green] {task_id}")


@main.command()
@click.argument("task_id", type=int)
@click.pass_context
def rm(ctx: click.Context, task_id: int) -> None:
    """Delete a task."""
    store: TaskStore = ctx.obj["store"]

    if not store.delete(task_id):
        console.print(f"[red]Task not found:[/red] {task_id}")
        return

    console.print(f"[green]Task deleted:[/green] {task_id}")


@main.command("clear-completed")
@click.pass_context
def clear_completed(ctx: click.Context) -> None:
    """Delete every completed task."""
    store: TaskStore = ctx.obj["store"]

    before = len(store.tasks)
    if not store.clear_completed():
        console.print("[dim]No completed tasks.[/dim]")
        return

    console.print(f"[green]Cleared {before - len(store.tasks)} completed tasks.[/green]")


@main.command("delete-all")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_all(ctx: click.Context, yes: bool) -> None:
    """Delete every task."""
    store: TaskStore = ctx.obj["store"]

    if not store.tasks:
        console.print("[dim]No tasks.[/dim]")
        return

    if not yes:
        if not click.confirm("Are you sure you want to delete all tasks?", default=False):
            console.print("[dim]Cancelled.[/dim]")
            return

    count = len(store.tasks)
    store.delete_all()
    console.print(f"[green]Deleted {count} tasks.[/green]")


@main.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["markdown", "plain"]),
    default="markdown",
    show_default=True,
    help="Output format",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.option("--filter", "-f", "status_filter", type=click.Choice(STATUS_FILTERS), help="Status filter")
@click.option("--search", "-s", default="", help="Only tasks whose text contains this")
@click.option("--template", type=click.Path(exists=True, dir_okay=False), help="Custom jinja2 template")
@click.pass_context
def export(
    ctx: click.Context,
    fmt: str,
    output: str | None,
    status_filter: str | None,
    search: str,
    template: str | None,
) -> None:
    """Export tasks as a Markdown checklist or plain text.

    Example:

        taskpad export -o TODO.md
    """
    from taskpad.derive import counts, visible_tasks
    from taskpad.export import render_tasks

    config: TaskpadConfig = ctx.obj["config"]
    store: TaskStore = ctx.obj["store"]

    if status_filter:
        store.set_filter(status_filter)  # type: ignore[arg-type]
    store.set_search(search)

    view = visible_tasks(store.state, config.filters.combine_search)
    text = render_tasks(
        view,
        counts(store.tasks),
        fmt=fmt,  # type: ignore[arg-type]
        template_path=template,
        date_format=config.display.date_format,
    )

    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        console.print(f"[green]Exported {len(view)} tasks to:[/green] {output}")
    else:
        click.echo(text, nl=False)


@main.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Interactive mode: add, edit, filter and search in one session."""
    from taskpad.shell import Shell

    Shell(ctx.obj["store"], ctx.obj["config"], console).run()


if __name__ == "__main__":
    main()
