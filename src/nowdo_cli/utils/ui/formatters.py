"""Output formatters for different formats."""

from __future__ import annotations

import json
from typing import Any

import yaml
from pydantic import BaseModel
from rich.table import Table

from nowdo_cli.utils.ui.console import get_console

OUTPUT_FORMATS = ("pretty", "table", "json", "yaml", "quiet")


def _plain(data: Any) -> Any:
    """Turn models (or lists of models) into JSON-ready dicts."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_plain(item) for item in data]
    return data


def format_output(
    data: Any, output_format: str = "pretty", compact: bool = False
) -> None:
    """Format and display output based on format."""
    data = _plain(data)
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False))
    elif output_format == "table":
        format_table(data)
    elif output_format == "quiet":
        format_quiet(data)
    else:
        format_pretty(data, compact=compact)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_table(data: Any) -> None:
    """Format data as a table."""
    console = get_console()
    if not data:
        console.print("[yellow]No items found[/yellow]")
        return

    if isinstance(data, dict):
        format_single_item(data)
        return

    columns = list(data[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for item in data:
        table.add_row(*(_cell(item.get(col)) for col in columns))
    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    for key, value in item.items():
        table.add_row(key.replace("_", " ").title(), _cell(value))
    get_console().print(table)


def format_quiet(data: Any) -> None:
    """Format output in quiet mode (IDs only)."""
    if isinstance(data, list):
        for item in data:
            if isinstance(item, dict) and "id" in item:
                print(item["id"])
    elif isinstance(data, dict) and "id" in data:
        print(data["id"])


def format_error(message: str) -> None:
    """Format and display an error message."""
    get_console().print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    get_console().print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    get_console().print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    get_console().print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Pretty Format Implementation
# ============================================================================

PRIORITY_ICONS = {
    "high": "🔴",
    "medium": "🟡",
    "low": "🟢",
}

STATUS_ICONS = {
    "pending": "⬜",
    "in-progress": "⏳",
    "completed": "☑️",
}

CATEGORY_COLORS = {
    "work": "blue",
    "personal": "magenta",
    "health": "green",
    "education": "yellow",
}


def format_pretty(data: Any, compact: bool = False) -> None:
    """Format data in pretty format with colors and icons."""
    console = get_console()
    if not data:
        console.print("[yellow]No items found[/yellow]")
        return

    if isinstance(data, dict):
        format_single_item(data)
        return

    first = data[0]
    if "priority" in first and "status" in first:
        format_tasks_pretty(data, compact=compact)
    elif "target_days" in first:
        format_habits_pretty(data, compact=compact)
    elif "session_type" in first or "duration" in first:
        format_sessions_pretty(data)
    else:
        format_table(data)


def format_tasks_pretty(tasks: list[dict], compact: bool = False) -> None:
    console = get_console()
    for task in tasks:
        icon = STATUS_ICONS.get(task.get("status", ""), "⬜")
        priority = PRIORITY_ICONS.get(task.get("priority", ""), "")
        color = CATEGORY_COLORS.get(task.get("category", ""), "white")
        line = f"{icon} {priority} [bold]{task.get('title', '')}[/bold]"
        line += f" [{color}]#{task.get('category', '')}[/{color}]"
        scheduled = (task.get("scheduled_date"), task.get("scheduled_time"))
        when = " ".join(str(v) for v in scheduled if v)
        if when:
            line += f" [dim]📅 {when}[/dim]"
        console.print(line)
        if not compact:
            if task.get("description"):
                console.print(f"    [dim]{task['description']}[/dim]")
            console.print(f"    [dim]id: {task.get('id')}[/dim]")


def format_habits_pretty(habits: list[dict], compact: bool = False) -> None:
    console = get_console()
    day_names = "MTWTFSS"
    for habit in habits:
        days = set(habit.get("target_days") or [])
        week = "".join(
            day_names[d - 1] if d in days else "·" for d in range(1, 8)
        )
        console.print(
            f"[{habit.get('color', 'white')}]●[/] "
            f"[bold]{habit.get('title', '')}[/bold]"
            f" [dim]{habit.get('category', '')}[/dim] [cyan]{week}[/cyan]"
        )
        if not compact:
            console.print(f"    [dim]id: {habit.get('id')}[/dim]")


def format_sessions_pretty(sessions: list[dict]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    for col in ("Type", "Minutes", "Started", "Completed"):
        table.add_column(col)
    for session in sessions:
        table.add_row(
            session.get("session_type") or session.get("type") or "-",
            _cell(session.get("duration")),
            _cell(session.get("start_time")),
            _cell(session.get("completed")),
        )
    get_console().print(table)
