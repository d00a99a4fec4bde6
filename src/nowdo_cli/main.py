"""Main entry point for NowDo CLI."""

import typer

from nowdo_cli import __version__
from nowdo_cli.commands import (
    auth,
    config,
    data,
    habits,
    pomodoro,
    profile,
    settings,
    sync,
    tasks,
)
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console

app = typer.Typer(
    name="nowdo",
    cls=SuggestingGroup,
    help="Command-line client for NowDo tasks, habits and pomodoro sessions",
    no_args_is_help=True,
)

console = get_console(highlight=False)


app.add_typer(auth.app, name="auth", help="Authentication commands")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(habits.app, name="habits", help="Habit tracking commands")
app.add_typer(pomodoro.app, name="pomodoro", help="Pomodoro session history")
app.add_typer(settings.app, name="settings", help="Account settings and preferences")
app.add_typer(profile.app, name="profile", help="Profile commands")
app.add_typer(data.app, name="data", help="Data management (summary, clear)")
app.add_typer(config.app, name="config", help="Configuration management")

app.command("sync")(sync.sync_command)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]NowDo CLI[/bold] version [cyan]{__version__}[/cyan]")


@app.command()
def login(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
) -> None:
    """Login to NowDo."""
    auth.login(email=email, password=password)


@app.command()
def logout() -> None:
    """Logout from NowDo."""
    auth.logout()


@app.command()
def whoami(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show current user information."""
    auth.whoami(output=output)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
