"""Data management commands (summary, clear)."""

from typing import Annotated

import typer
from rich.prompt import Prompt
from rich.table import Table

from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import (
    format_info,
    format_output,
    format_success,
    format_warning,
)

from .decorators import command_wrapper
from .utils import signed_in

app = typer.Typer(cls=SuggestingGroup, help="Data management commands")
console = get_console()

CONFIRM_PHRASE = "DELETE"


def _title(key: str) -> str:
    return key.replace("_", " ").title()


@app.command("summary")
@command_wrapper
async def data_summary(
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "table",
) -> None:
    """Show how many records your account holds."""
    async with signed_in() as ctx:
        summary = await ctx.data.get_data_summary(ctx.user.id)

    if output != "table":
        format_output(summary, output)
        return

    table = Table(title="Your data", show_header=True, header_style="bold magenta")
    table.add_column("Collection", style="cyan")
    table.add_column("Count")
    for name, counts in (summary.get("summary") or {}).items():
        if isinstance(counts, dict):
            detail = ", ".join(f"{_title(k)}: {v}" for k, v in counts.items())
        else:
            detail = str(counts)
        table.add_row(_title(name), detail)
    console.print(table)
    if summary.get("last_activity"):
        console.print(f"[dim]Last activity: {summary['last_activity']}[/dim]")


@app.command("clear")
@command_wrapper
async def clear_data(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Permanently delete all tasks, habits and sessions.

    Preferences are reset to their defaults. Settings and the profile are kept.
    """
    if not yes:
        format_warning("This permanently deletes all your tasks, habits and sessions.")
        answer = Prompt.ask(f"Type {CONFIRM_PHRASE} to confirm")
        if answer != CONFIRM_PHRASE:
            format_info("Cancelled")
            return

    async with signed_in() as ctx:
        result = await ctx.data.clear_user_data(ctx.user.id)

    deleted = result.get("deleted_counts") if isinstance(result, dict) else None
    if deleted:
        counts = ", ".join(f"{v} {k.replace('_', ' ')}" for k, v in deleted.items())
        format_success(f"All user data cleared ({counts})")
    else:
        format_success("All user data cleared")
