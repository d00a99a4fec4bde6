"""Load all user data through the app shell."""

from typing import Annotated

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from nowdo_cli.models.exceptions import NotAuthenticatedError
from nowdo_cli.services.api.client import get_client
from nowdo_cli.services.events import Collection
from nowdo_cli.shell import build_app_shell
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_error, format_output

from .decorators import command_wrapper
from .utils import ConsoleNavigator

console = get_console()


@command_wrapper
async def sync_command(
    strict: Annotated[
        bool, typer.Option("--strict", help="Exit non-zero if any fetch fails")
    ] = False,
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "table",
) -> None:
    """Sign in from the stored session and fetch every collection.

    Examples:
        nowdo sync
        nowdo sync --strict -o json
    """
    async with get_client() as client:
        navigator = ConsoleNavigator()
        shell = build_app_shell(client, navigator)
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task("Loading your data...", total=None)
                await shell.start(client.config.system_color_scheme)
                if shell.auth.user is None:
                    raise NotAuthenticatedError(
                        "Session expired. Use 'nowdo auth login' to sign in again."
                    )
                await shell.wait_idle()
                result = shell.sync.result()
        finally:
            shell.close()

        state = shell.store.state

    summary = {
        "user_id": result.user_id,
        "tasks": len(state.tasks.tasks),
        "habits": len(state.habits.habits),
        "habit_completions": len(state.habits.completions),
        "pomodoro_sessions": len(state.pomodoro.sessions),
        "theme": state.theme.mode,
        "dark": state.theme.is_dark,
        "duration": f"{result.duration:.2f}s",
    }

    if output == "table":
        table = Table(
            title="Sync summary", show_header=True, header_style="bold magenta"
        )
        table.add_column("Collection")
        table.add_column("Rows", justify="right")
        table.add_column("Status")
        for collection in Collection:
            error = result.errors.get(collection)
            table.add_row(
                collection.value,
                str(result.counts.get(collection, "-")),
                f"[red]{error.message}[/red]" if error else "[green]ok[/green]",
            )
        console.print(table)
        console.print(
            f"[dim]theme: {state.theme.mode} "
            f"({'dark' if state.theme.is_dark else 'light'})"
            f", took {summary['duration']}[/dim]"
        )
    else:
        summary["errors"] = {c.value: e.message for c, e in result.errors.items()}
        format_output(summary, output)

    if result.errors:
        for collection, error in result.errors.items():
            format_error(f"{collection.value}: {error.message}")
        if strict:
            result.raise_for_error()
