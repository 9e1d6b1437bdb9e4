"""Render board projections as plain-text tables with rich."""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import STAGE_TITLES, STAGES
from .utils import format_display_time

_PRIORITY_STYLE = {"high": "bold red", "medium": "yellow", "low": "green"}


def _console(width: int) -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=width, force_terminal=False, color_system=None), buffer


def _stage_table(stage: str, activities: Sequence[Any]) -> Table:
    table = Table(title=f"{STAGE_TITLES[stage]} ({len(activities)})", title_justify="left")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Assignee")
    table.add_column("Start")
    table.add_column("End")
    for activity in activities:
        priority = activity.priority.value
        style = _PRIORITY_STYLE[priority]
        table.add_row(
            str(activity.id),
            escape(activity.title),
            f"[{style}]{priority}[/{style}]",
            escape(activity.assignee),
            format_display_time(activity.start_date),
            format_display_time(activity.end_date),
        )
    return table


def format_board(columns: Mapping[str, Sequence[Any]], *, heading: str = "Activity Board", width: int = 120) -> str:
    """Format a projected board as text, one table per stage.

    Args:
        columns: Mapping of stage -> activities, e.g. from ``project_board``.
        heading: Title printed above the tables.
        width: Console width used for layout.

    Returns:
        The rendered text.
    """
    console, buffer = _console(width)
    console.print(f"[bold]{heading}[/bold]")
    for stage in STAGES:
        console.print()
        console.print(_stage_table(stage, list(columns.get(stage, ()))))
    return buffer.getvalue()


def format_assignees(names: Sequence[str]) -> str:
    console, buffer = _console(80)
    for name in names:
        console.print(name, markup=False, highlight=False)
    return buffer.getvalue()
