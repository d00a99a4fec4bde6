"""Typer helper utilities."""

from difflib import get_close_matches

import typer
from typer.core import TyperGroup

from nowdo_cli.utils.ui.console import get_console

MAX_SUGGESTIONS = 3


def suggest_commands(attempted: str, names: list[str]) -> list[str]:
    """Commands the user probably meant: prefix matches first, then typos.

    ``pomo`` finds ``pomodoro`` and ``taks`` finds ``tasks``.
    """
    prefixed = sorted(name for name in names if name.startswith(attempted))
    close = get_close_matches(attempted, names, n=MAX_SUGGESTIONS, cutoff=0.6)
    suggestions = prefixed + [name for name in close if name not in prefixed]
    return suggestions[:MAX_SUGGESTIONS]


class SuggestingGroup(TyperGroup):
    """Typer group that answers an unknown command with the nearest ones."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except Exception as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = suggest_commands(attempted, list(self.commands))
            if not suggestions:
                raise

            console = get_console()
            console.print(
                f'[red]Error:[/red] unknown command "{attempted}" '
                f'for "{ctx.command_path}"'
            )
            console.print()
            if len(suggestions) == 1:
                console.print("[yellow]Did you mean this?[/yellow]")
            else:
                console.print("[yellow]Did you mean one of these?[/yellow]")
            for suggestion in suggestions:
                console.print(f"        {ctx.command_path} {suggestion}")
            raise typer.Exit(1) from e
