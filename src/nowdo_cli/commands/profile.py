"""Profile commands."""

from pathlib import Path
from typing import Annotated

import typer

from nowdo_cli.models.core import UserProfileUpdate
from nowdo_cli.utils.exit_codes import ERROR_INVALID_ARGS
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import format_info, format_output, format_success

from .decorators import AppError, command_wrapper
from .utils import parse_date, signed_in

app = typer.Typer(cls=SuggestingGroup, help="Profile commands")
console = get_console()


@app.command("show")
@command_wrapper
async def show_profile(
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "table",
) -> None:
    """Show the profile, creating it on first use."""
    async with signed_in() as ctx:
        profile = await ctx.data.get_profile(ctx.user.id, ctx.user.email)
    format_output(profile, output)


@app.command("update")
@command_wrapper
async def update_profile(
    first_name: Annotated[str | None, typer.Option("--first-name")] = None,
    last_name: Annotated[str | None, typer.Option("--last-name")] = None,
    phone: Annotated[str | None, typer.Option("--phone")] = None,
    birthday: Annotated[
        str | None, typer.Option("--birthday", help="Date of birth (YYYY-MM-DD)")
    ] = None,
    location: Annotated[str | None, typer.Option("--location")] = None,
    profession: Annotated[str | None, typer.Option("--profession")] = None,
) -> None:
    """Update profile fields."""
    update = UserProfileUpdate(
        first_name=first_name,
        last_name=last_name,
        phone_number=phone,
        date_of_birth=parse_date(birthday),
        location=location,
        profession=profession,
    )
    async with signed_in() as ctx:
        await ctx.data.update_profile(ctx.user.id, update)
    format_success("Profile updated")


@app.command("upload-picture")
@command_wrapper
async def upload_picture(
    path: Annotated[Path, typer.Argument(help="Image file to upload")],
) -> None:
    """Upload a new profile picture."""
    if not path.is_file():
        raise AppError(f"File not found: {path}", exit_code=ERROR_INVALID_ARGS)
    async with signed_in() as ctx:
        profile = await ctx.data.upload_profile_picture(ctx.user.id, path)
    format_success("Profile picture updated")
    format_info(profile.profile_picture_url or "")


@app.command("remove-picture")
@command_wrapper
async def remove_picture() -> None:
    """Delete the profile picture."""
    async with signed_in() as ctx:
        await ctx.data.remove_profile_picture(ctx.user.id)
    format_success("Profile picture removed")
