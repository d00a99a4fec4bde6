"""Pomodoro session commands."""

from datetime import UTC, datetime, timedelta
from typing import Annotated

import typer

from nowdo_cli.models.core import (
    DateRange,
    PomodoroSessionCreate,
    PomodoroSessionUpdate,
)
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .utils import parse_datetime, signed_in

app = typer.Typer(cls=SuggestingGroup, help="Pomodoro session history")
console = get_console()

OutputOption = Annotated[str, typer.Option("--output", "-o", help="Output format")]


@app.command("list")
@command_wrapper
async def list_sessions(
    limit: Annotated[int | None, typer.Option("--limit", help="Limit results")] = 20,
    offset: Annotated[
        int | None, typer.Option("--offset", help="Pagination offset")
    ] = None,
    start: Annotated[
        str | None, typer.Option("--from", help="Started at or after (ISO datetime)")
    ] = None,
    end: Annotated[
        str | None, typer.Option("--to", help="Started at or before (ISO datetime)")
    ] = None,
    output: OutputOption = "pretty",
) -> None:
    """List sessions, most recent first."""
    date_range = None
    if start or end:
        date_range = DateRange(
            start=parse_datetime(start) or datetime.min.replace(tzinfo=UTC),
            end=parse_datetime(end) or datetime.now(UTC),
        )
    async with signed_in() as ctx:
        sessions = await ctx.data.list_sessions(
            ctx.user.id, limit=limit, offset=offset, date_range=date_range
        )
    format_output(sessions, output)


@app.command("log")
@command_wrapper
async def log_session(
    duration: Annotated[int, typer.Option("--duration", "-m", help="Minutes")] = 25,
    session_type: Annotated[
        str, typer.Option("--type", "-t", help="work or break")
    ] = "work",
    task_id: Annotated[
        str | None, typer.Option("--task", help="Task worked on")
    ] = None,
    start: Annotated[
        str | None,
        typer.Option("--start", help="Start (ISO datetime, default: duration ago)"),
    ] = None,
    completed: Annotated[
        bool, typer.Option("--completed/--running", help="Whether the session ended")
    ] = True,
    output: OutputOption = "pretty",
) -> None:
    """Record a pomodoro session.

    Examples:
        nowdo pomodoro log -m 25 --task <task-id>
        nowdo pomodoro log -t break -m 5
        nowdo pomodoro log --running
    """
    now = datetime.now(UTC)
    start_time = parse_datetime(start)
    if start_time is None:
        start_time = now - timedelta(minutes=duration) if completed else now
    session = PomodoroSessionCreate(
        task_id=task_id,
        type=session_type,
        duration=duration,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=duration) if completed else None,
        completed=completed,
    )
    async with signed_in() as ctx:
        created = await ctx.data.log_session(ctx.user.id, session)
    if output == "pretty":
        format_success(
            f"Logged {created.duration} min {created.type} session ({created.id})"
        )
    else:
        format_output(created, output)


@app.command("complete")
@command_wrapper
async def complete_session(
    session_id: Annotated[str, typer.Argument(help="Session ID")],
) -> None:
    """Mark a running session as completed now."""
    update = PomodoroSessionUpdate(end_time=datetime.now(UTC), completed=True)
    async with signed_in() as ctx:
        await ctx.data.update_session(ctx.user.id, session_id, update)
    format_success(f"Session completed: {session_id}")


@app.command("delete")
@command_wrapper
async def delete_session(
    session_id: Annotated[str, typer.Argument(help="Session ID")],
) -> None:
    """Delete a session."""
    async with signed_in() as ctx:
        await ctx.data.delete_session(ctx.user.id, session_id)
    format_success(f"Session deleted: {session_id}")
