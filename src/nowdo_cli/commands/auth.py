"""Authentication commands."""

from typing import Annotated

import typer
from rich.prompt import Prompt

from nowdo_cli.services.api.client import get_client
from nowdo_cli.services.auth_service import AuthService, OAuthCallbackHandler
from nowdo_cli.utils.typer_helpers import SuggestingGroup
from nowdo_cli.utils.ui.console import get_console
from nowdo_cli.utils.ui.formatters import (
    format_info,
    format_output,
    format_success,
    format_warning,
)

from .decorators import AppError, command_wrapper
from .utils import ConsoleNavigator, signed_in

app = typer.Typer(cls=SuggestingGroup, help="Authentication commands")
console = get_console()


@app.command("login")
@command_wrapper(auth_required=False)
async def login(
    email: Annotated[str | None, typer.Option("--email", help="Email address")] = None,
    password: Annotated[
        str | None, typer.Option("--password", help="Password")
    ] = None,
) -> None:
    """Sign in with email and password."""
    if not email:
        email = Prompt.ask("Email")
    if not password:
        password = Prompt.ask("Password", password=True)
    if not email or not password:
        raise AppError("Email and password are required")

    async with get_client() as client:
        user = await AuthService(client).sign_in(email, password)
    format_success(f"Logged in as {user.email}")


@app.command("signup")
@command_wrapper(auth_required=False)
async def signup(
    email: Annotated[str | None, typer.Option("--email", help="Email address")] = None,
    password: Annotated[
        str | None, typer.Option("--password", help="Password")
    ] = None,
    name: Annotated[str | None, typer.Option("--name", help="Full name")] = None,
) -> None:
    """Create a new account."""
    if not email:
        email = Prompt.ask("Email")
    if not password:
        password = Prompt.ask("Password", password=True)
        confirm_password = Prompt.ask("Confirm password", password=True)
        if password != confirm_password:
            raise AppError("Passwords do not match")

    async with get_client() as client:
        auth = AuthService(client)
        await auth.sign_up(email, password, name)
        signed_in_user = auth.user

    if signed_in_user is not None:
        format_success(f"Account created, logged in as {signed_in_user.email}")
    else:
        format_success(f"Account created for {email}")
        format_info("Check your inbox to confirm your email, then log in.")


@app.command("logout")
@command_wrapper(auth_required=False)
async def logout() -> None:
    """Sign out on every device and forget the local session."""
    async with get_client() as client:
        auth = AuthService(client)
        await auth.restore()
        await auth.sign_out()
    format_success("Logged out")


@app.command("whoami")
@command_wrapper
async def whoami(
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "table",
) -> None:
    """Show the signed-in user."""
    async with signed_in() as ctx:
        user = ctx.user
        format_output(
            {"id": user.id, "email": user.email, "full_name": user.full_name}, output
        )


@app.command("oauth-url")
@command_wrapper(auth_required=False)
def oauth_url(
    provider: Annotated[str, typer.Argument(help="OAuth provider")] = "google",
) -> None:
    """Start a provider sign-in and print the URL to open."""
    client = get_client()
    url = AuthService(client).sign_in_with_provider(provider)
    console.print(url)


@app.command("oauth-callback")
@command_wrapper(auth_required=False)
async def oauth_callback(
    code: Annotated[
        str | None, typer.Option("--code", help="Code from the redirect URL")
    ] = None,
    error: Annotated[
        str | None, typer.Option("--error", help="Error from the redirect URL")
    ] = None,
) -> None:
    """Finish a provider sign-in with the code from the redirect."""
    navigator = ConsoleNavigator("/(auth)/oauth-callback")
    async with get_client() as client:
        handler = OAuthCallbackHandler(AuthService(client), navigator)
        ok = await handler.handle(code=code, error=error)
    if ok:
        format_success(handler.message or "Signed in")
    else:
        format_warning(handler.message or "Sign-in failed")
        raise typer.Exit(3)


@app.command("reset-password")
@command_wrapper(auth_required=False)
async def reset_password(
    email: Annotated[str | None, typer.Option("--email", help="Email address")] = None,
) -> None:
    """Send a password reset email."""
    if not email:
        email = Prompt.ask("Email")
    async with get_client() as client:
        await AuthService(client).reset_password(email)
    format_success(f"Password reset email sent to {email}")
