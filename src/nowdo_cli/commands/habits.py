"""Habit tracking commands."""

from datetime import date
from typing import Annotated

import typer
from rich.prompt import Confirm

from nowdo_cli.models.core import DateRange, HabitCreate, HabitUpdate
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper
from .utils import parse_date, parse_days, signed_in

app = typer.Typer(cls=SuggestingGroup, help="Habit tracking commands")
console = get_console()

OutputOption = Annotated[str, typer.Option("--output", "-o", help="Output format")]
DaysOption = Annotated[
    str | None,
    typer.Option("--days", help="Target weekdays, 1=Mon..7=Sun, e.g. 1,3,5"),
]


@app.command("list")
@command_wrapper
async def list_habits(
    output: OutputOption = "pretty",
    compact: Annotated[bool, typer.Option("--compact", help="Compact output")] = False,
) -> None:
    """List habits, newest first."""
    async with signed_in() as ctx:
        habits = await ctx.data.list_habits(ctx.user.id)
    format_output(habits, output, compact)


@app.command("search")
@command_wrapper
async def search_habits(
    text: Annotated[str, typer.Argument(help="Text to find in title or description")],
    output: OutputOption = "pretty",
) -> None:
    """Search habits by title and description."""
    async with signed_in() as ctx:
        habits = await ctx.data.search_habits(ctx.user.id, text)
    format_output(habits, output)


@app.command("add")
@command_wrapper
async def add_habit(
    title: Annotated[str, typer.Argument(help="Habit title")],
    description: Annotated[
        str, typer.Option("--description", "-d", help="Description")
    ] = "",
    category: Annotated[
        str, typer.Option("--category", "-c", help="Category")
    ] = "Health",
    color: Annotated[str, typer.Option("--color", help="Hex color")] = "#4FC3F7",
    days: DaysOption = None,
    output: OutputOption = "pretty",
) -> None:
    """Create a habit."""
    fields = {"target_days": parse_days(days)} if days else {}
    habit = HabitCreate(
        title=title, description=description, category=category, color=color, **fields
    )
    async with signed_in() as ctx:
        created = await ctx.data.add_habit(ctx.user.id, habit)
    if output == "pretty":
        format_success(f"Habit created: {created.title} ({created.id})")
    else:
        format_output(created, output)


@app.command("update")
@command_wrapper
async def update_habit(
    habit_id: Annotated[str, typer.Argument(help="Habit ID")],
    title: Annotated[str | None, typer.Option("--title", help="New title")] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="New description")
    ] = None,
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Category")
    ] = None,
    color: Annotated[str | None, typer.Option("--color", help="Hex color")] = None,
    days: DaysOption = None,
    output: OutputOption = "pretty",
) -> None:
    """Update only the given fields of a habit."""
    update = HabitUpdate(
        title=title,
        description=description,
        category=category,
        color=color,
        target_days=parse_days(days),
    )
    async with signed_in() as ctx:
        updated = await ctx.data.update_habit(ctx.user.id, habit_id, update)
    if output == "pretty":
        format_success(f"Habit updated: {updated.title}")
    else:
        format_output(updated, output)


@app.command("delete")
@command_wrapper
async def delete_habit(
    habit_id: Annotated[str, typer.Argument(help="Habit ID")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete a habit and its completions."""
    if not yes and not Confirm.ask(f"Delete habit {habit_id}?"):
        format_info("Cancelled")
        return
    async with signed_in() as ctx:
        await ctx.data.delete_habit(ctx.user.id, habit_id)
    format_success(f"Habit deleted: {habit_id}")


@app.command("toggle")
@command_wrapper
async def toggle_habit(
    habit_id: Annotated[str, typer.Argument(help="Habit ID")],
    on: Annotated[
        str | None, typer.Option("--date", help="Day to toggle (default today)")
    ] = None,
) -> None:
    """Mark a habit done for a day, or undo it."""
    day = parse_date(on) or date.today()
    async with signed_in() as ctx:
        completion = await ctx.data.toggle_completion(ctx.user.id, habit_id, day)
    state = "done" if completion.completed else "not done"
    format_success(f"Habit marked {state} for {day.isoformat()}")


@app.command("completions")
@command_wrapper
async def list_completions(
    habit_id: Annotated[
        str | None, typer.Option("--habit", help="Only this habit")
    ] = None,
    start: Annotated[
        str | None, typer.Option("--from", help="From (YYYY-MM-DD)")
    ] = None,
    end: Annotated[str | None, typer.Option("--to", help="To (YYYY-MM-DD)")] = None,
    output: OutputOption = "table",
) -> None:
    """List habit completions."""
    date_range = None
    if start or end:
        date_range = DateRange(
            start=parse_date(start) or date.min, end=parse_date(end) or date.max
        )
    async with signed_in() as ctx:
        completions = await ctx.data.list_completions(ctx.user.id, habit_id, date_range)
    format_output(completions, output)
