"""Task management commands."""

from datetime import UTC, datetime, time, timedelta
from typing import Annotated

import typer
from rich.prompt import Confirm

from nowdo_cli.models.core import DateRange, TaskCreate, TaskFilters, TaskUpdate
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper
from .utils import parse_date, parse_datetime, signed_in

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")
console = get_console()

DEFAULT_TASK_SPAN = timedelta(days=1)

OutputOption = Annotated[str, typer.Option("--output", "-o", help="Output format")]
CompactOption = Annotated[bool, typer.Option("--compact", help="Compact output")]


def _date_range(start: str | None, end: str | None) -> DateRange | None:
    if not start and not end:
        return None
    if not start or not end:
        raise ValueError("--from and --to must be given together")
    return DateRange(start=parse_date(start), end=parse_date(end))


@app.command("list")
@command_wrapper
async def list_tasks(
    status: Annotated[
        str | None, typer.Option("--status", help="Filter by status")
    ] = None,
    priority: Annotated[
        str | None, typer.Option("--priority", help="Filter by priority")
    ] = None,
    category: Annotated[
        str | None, typer.Option("--category", help="Filter by category")
    ] = None,
    on: Annotated[
        str | None, typer.Option("--date", help="Scheduled date (YYYY-MM-DD)")
    ] = None,
    start: Annotated[
        str | None, typer.Option("--from", help="Scheduled on or after (YYYY-MM-DD)")
    ] = None,
    end: Annotated[
        str | None, typer.Option("--to", help="Scheduled on or before (YYYY-MM-DD)")
    ] = None,
    sort_by: Annotated[
        str, typer.Option("--sort", help="Sort field")
    ] = "scheduled_time",
    desc: Annotated[bool, typer.Option("--desc", help="Sort descending")] = False,
    limit: Annotated[int | None, typer.Option("--limit", help="Limit results")] = None,
    offset: Annotated[
        int | None, typer.Option("--offset", help="Pagination offset")
    ] = None,
    output: OutputOption = "pretty",
    compact: CompactOption = False,
) -> None:
    """List tasks.

    Examples:
        nowdo tasks list --status pending --priority high
        nowdo tasks list --from 2025-06-01 --to 2025-06-07 --sort priority --desc
    """
    filters = TaskFilters(
        status=status,
        priority=priority,
        category=category,
        scheduled_date=parse_date(on),
        date_range=_date_range(start, end),
        sort_by=sort_by,
        sort_order="desc" if desc else "asc",
        limit=limit,
        offset=offset,
    )
    async with signed_in() as ctx:
        tasks = await ctx.data.list_tasks(ctx.user.id, filters)
    format_output(tasks, output, compact)


@app.command("search")
@command_wrapper
async def search_tasks(
    text: Annotated[str, typer.Argument(help="Text to find in title or description")],
    status: Annotated[
        str | None, typer.Option("--status", help="Filter by status")
    ] = None,
    limit: Annotated[int | None, typer.Option("--limit", help="Limit results")] = None,
    output: OutputOption = "pretty",
    compact: CompactOption = False,
) -> None:
    """Search tasks by title and description."""
    filters = TaskFilters(status=status, limit=limit) if status or limit else None
    async with signed_in() as ctx:
        tasks = await ctx.data.search_tasks(ctx.user.id, text, filters)
    format_output(tasks, output, compact)


@app.command("add")
@command_wrapper
async def add_task(
    title: Annotated[str, typer.Argument(help="Task title")],
    description: Annotated[
        str, typer.Option("--description", "-d", help="Task description")
    ] = "",
    category: Annotated[
        str, typer.Option("--category", "-c", help="Category")
    ] = "personal",
    priority: Annotated[
        str, typer.Option("--priority", "-p", help="Priority")
    ] = "medium",
    start: Annotated[
        str | None, typer.Option("--start", help="Start (ISO datetime, default now)")
    ] = None,
    end: Annotated[
        str | None,
        typer.Option("--end", help="End (ISO datetime, default: a day later)"),
    ] = None,
    on: Annotated[
        str | None, typer.Option("--date", help="Scheduled date (YYYY-MM-DD)")
    ] = None,
    at: Annotated[
        str | None, typer.Option("--time", help="Scheduled time (HH:MM)")
    ] = None,
    output: OutputOption = "pretty",
) -> None:
    """Create a task.

    Examples:
        nowdo tasks add "Write report" -p high -c work --date 2025-06-02 --time 09:30
    """
    start_date = parse_datetime(start) or datetime.now(UTC)
    end_date = parse_datetime(end) or start_date + DEFAULT_TASK_SPAN
    task = TaskCreate(
        title=title,
        description=description,
        category=category,
        priority=priority,
        start_date=start_date,
        end_date=end_date,
        scheduled_date=parse_date(on),
        scheduled_time=time.fromisoformat(at) if at else None,
    )
    async with signed_in() as ctx:
        created = await ctx.data.add_task(ctx.user.id, task)
    if output == "pretty":
        format_success(f"Task created: {created.title} ({created.id})")
    else:
        format_output(created, output)


@app.command("update")
@command_wrapper
async def update_task(
    task_id: Annotated[str, typer.Argument(help="Task ID")],
    title: Annotated[str | None, typer.Option("--title", help="New title")] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="New description")
    ] = None,
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Category")
    ] = None,
    priority: Annotated[
        str | None, typer.Option("--priority", "-p", help="Priority")
    ] = None,
    status: Annotated[str | None, typer.Option("--status", "-s", help="Status")] = None,
    on: Annotated[
        str | None, typer.Option("--date", help="Scheduled date (YYYY-MM-DD)")
    ] = None,
    at: Annotated[
        str | None, typer.Option("--time", help="Scheduled time (HH:MM)")
    ] = None,
    output: OutputOption = "pretty",
) -> None:
    """Update only the given fields of a task."""
    update = TaskUpdate(
        title=title,
        description=description,
        category=category,
        priority=priority,
        status=status,
        scheduled_date=parse_date(on),
        scheduled_time=time.fromisoformat(at) if at else None,
    )
    async with signed_in() as ctx:
        updated = await ctx.data.update_task(ctx.user.id, task_id, update)
    if output == "pretty":
        format_success(f"Task updated: {updated.title}")
    else:
        format_output(updated, output)


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: Annotated[str, typer.Argument(help="Task ID")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete a task."""
    if not yes and not Confirm.ask(f"Delete task {task_id}?"):
        format_info("Cancelled")
        return
    async with signed_in() as ctx:
        await ctx.data.delete_task(ctx.user.id, task_id)
    format_success(f"Task deleted: {task_id}")
