"""Render task lists as text with jinja2 templates."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Literal

from jinja2 import BaseLoader, Environment

from taskpad.derive import TaskCounts, is_overdue, items_left_label
from taskpad.models import Task

ExportFormat = Literal["markdown", "plain"]

MARKDOWN_TEMPLATE = """\
# {{ title }}

{% if tasks -%}
{% for task in tasks -%}
- [{{ "x" if task.completed else " " }}] {{ task.text }} \
_({{ task.priority }}{% if task.due %}, due {{ task.due }}{% if task.overdue %}, overdue{% endif %}{% endif %})_
{% endfor -%}
{% else -%}
No tasks found.
{% endif %}
All ({{ counts.total }}) | Active ({{ counts.active }}) | Completed ({{ counts.completed }})

{{ items_left }}
"""

PLAIN_TEMPLATE = """\
{% for task in tasks -%}
{{ "x" if task.completed else "-" }} {{ task.id }} [{{ task.priority | upper }}] {{ task.text }}\
{% if task.due %} (due {{ task.due }}{% if task.overdue %}, overdue{% endif %}){% endif %}
{% endfor -%}
{{ items_left }}
"""


def _get_template(fmt: ExportFormat, template_path: str | Path | None = None) -> str:
    """Get the template string for a format or a custom file."""
    if template_path:
        custom_path = Path(template_path)
        if custom_path.exists():
            return custom_path.read_text(encoding="utf-8")

    if fmt == "plain":
        return PLAIN_TEMPLATE
    return MARKDOWN_TEMPLATE


def render_tasks(
    tasks: Sequence[Task],
    counts: TaskCounts,
    fmt: ExportFormat = "markdown",
    today: date | None = None,
    template_path: str | Path | None = None,
    date_format: str = "%Y-%m-%d",
    title: str = "Tasks",
) -> str:
    """Render already filtered and sorted tasks with a footer of counts."""
    if today is None:
        today = date.today()

    env = Environment(loader=BaseLoader())
    template = env.from_string(_get_template(fmt, template_path))

    rows = [
        {
            "id": task.id,
            "text": task.text,
            "completed": task.completed,
            "priority": task.priority,
            "due": task.due_date.strftime(date_format) if task.due_date else None,
            "overdue": is_overdue(task, today),
            "created_at": task.created_at.isoformat(),
        }
        for task in tasks
    ]

    return template.render(
        title=title,
        tasks=rows,
        counts=counts,
        items_left=items_left_label(counts.active),
    )
