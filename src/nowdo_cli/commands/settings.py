"""Settings and preference commands."""

from typing import Annotated

import typer
from pydantic import BaseModel

from nowdo_cli.models.core import UserPreferencesUpdate, UserSettingsUpdate
from nowdo_cli.services.api.user_records import UserRecordsAPI
from nowdo_cli.services.config_service import get_config_service
from nowdo_cli.services.theme_service import ThemeService, compute_is_dark
from nowdo_cli.store import Store
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .utils import signed_in

app = typer.Typer(cls=SuggestingGroup, help="Account settings and preferences")
console = get_console()

OutputOption = Annotated[str, typer.Option("--output", "-o", help="Output format")]


def _update_from(model: type[BaseModel], key: str, value: str) -> BaseModel:
    """Validate a single ``key=value`` pair into an update model."""
    if key not in model.model_fields:
        valid = ", ".join(model.model_fields)
        raise ValueError(f"Unknown setting '{key}'. Valid keys: {valid}")
    return model.model_validate({key: value})


@app.command("show")
@command_wrapper
async def show_settings(output: OutputOption = "table") -> None:
    """Show account settings, creating the defaults on first use."""
    async with signed_in() as ctx:
        settings = await ctx.data.get_settings(ctx.user.id)
    format_output(settings, output)


@app.command("set")
@command_wrapper
async def set_setting(
    key: Annotated[str, typer.Argument(help="Setting name, e.g. language")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """Change one account setting."""
    update = _update_from(UserSettingsUpdate, key, value)
    async with signed_in() as ctx:
        await ctx.data.update_settings(ctx.user.id, update)
    format_success(f"Set {key} = {value}")


@app.command("theme")
@command_wrapper
async def set_theme(
    mode: Annotated[str | None, typer.Argument(help="light, dark or system")] = None,
) -> None:
    """Show or change the theme."""
    scheme = get_config_service().config.system_color_scheme
    async with signed_in() as ctx:
        theme = ThemeService(UserRecordsAPI(ctx.client), Store())
        if mode is None:
            current = await theme.load_for_user(ctx.user.id)
        else:
            current = await theme.set_mode(ctx.user.id, mode)
    shade = "dark" if compute_is_dark(current, scheme) else "light"
    if mode is None:
        console.print(f"Theme: [bold]{current}[/bold] ({shade})")
    else:
        format_success(f"Theme set to {current} ({shade})")


@app.command("preferences")
@command_wrapper
async def show_preferences(output: OutputOption = "table") -> None:
    """Show timer and app preferences."""
    async with signed_in() as ctx:
        preferences = await ctx.data.get_preferences(ctx.user.id)
    format_output(preferences, output)


@app.command("set-preference")
@command_wrapper
async def set_preference(
    key: Annotated[str, typer.Argument(help="Preference name, e.g. work_duration")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """Change one preference."""
    update = _update_from(UserPreferencesUpdate, key, value)
    async with signed_in() as ctx:
        await ctx.data.update_preferences(ctx.user.id, update)
    format_success(f"Set {key} = {value}")
