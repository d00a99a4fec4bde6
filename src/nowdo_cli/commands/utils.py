"""Shared helpers for commands."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date, datetime

from nowdo_cli.models.core import AuthUser
from nowdo_cli.services.api.client import APIClient, get_client
from nowdo_cli.services.auth_service import AuthService
from nowdo_cli.services.user_data_service import UserDataService
from nowdo_cli.utils.ui.console import get_console


@dataclass
class CommandContext:
    client: APIClient
    auth: AuthService
    user: AuthUser
    data: UserDataService


@asynccontextmanager
async def signed_in() -> AsyncIterator[CommandContext]:
    """Restore the stored session and yield the signed-in user's services."""
    client = get_client()
    try:
        auth = AuthService(client)
        await auth.restore()
        user = auth.require_user()
        yield CommandContext(client, auth, user, UserDataService(client))
    finally:
        await client.close()


class ConsoleNavigator:
    """Navigator that reports route changes on the console."""

    def __init__(self, current_path: str | None = None):
        self.current_path = current_path
        self.history: list[str] = []

    def replace(self, route: str) -> None:
        self.history.append(route)
        self.current_path = route
        get_console().print(f"[dim]→ {route}[/dim]")


def parse_days(value: str | None) -> list[int] | None:
    """Parse ``"1,3,5"`` into weekday indices."""
    if not value:
        return None
    return [int(part) for part in value.split(",") if part.strip()]


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)
