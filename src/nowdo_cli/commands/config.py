"""Configuration management commands."""

from typing import Annotated

import typer
from pydantic import ValidationError

from nowdo_cli.services.config_service import get_config_service
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_info, format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()

_SECRET_KEYS = {"anon_key", "ios_api_key", "android_api_key"}


def _mask(data: dict) -> dict:
    masked = {}
    for key, value in data.items():
        if isinstance(value, dict):
            masked[key] = _mask(value)
        elif key in _SECRET_KEYS and value:
            masked[key] = f"{value[:4]}…"
        else:
            masked[key] = value
    return masked


def _flatten(data: dict, prefix: str = "") -> dict:
    flat = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


@app.command("view")
@command_wrapper(auth_required=False)
def view_config(
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "table",
    show_secrets: Annotated[
        bool, typer.Option("--show-secrets", help="Print keys unmasked")
    ] = False,
) -> None:
    """View the effective configuration, environment overrides included."""
    config_dict = get_config_service().config.model_dump(mode="json")
    if not show_secrets:
        config_dict = _mask(config_dict)
    if output == "table":
        config_dict = _flatten(config_dict)
    format_output(config_dict, output)


@app.command("get")
@command_wrapper(auth_required=False)
def get_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., api.timeout)")],
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found")
    console.print(value)


@app.command("set")
@command_wrapper(auth_required=False)
def set_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., backend.url)")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """Set a configuration value."""
    parsed_value: str | int | bool = value
    if value.lower() in ("true", "false"):
        parsed_value = value.lower() == "true"
    elif value.isdigit():
        parsed_value = int(value)

    try:
        get_config_service().set(key, parsed_value)
    except KeyError as e:
        raise AppError(str(e.args[0])) from e
    except ValidationError as e:
        raise AppError(f"Invalid value for '{key}': {e.errors()[0]['msg']}") from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper(auth_required=False)
def reset_config(
    key: Annotated[
        str | None, typer.Argument(help="Configuration key to reset")
    ] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            format_info("Cancelled")
            return

    try:
        get_config_service().reset(key)
    except KeyError as e:
        raise AppError(str(e.args[0])) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
