"""Theme resolution from persisted user settings."""

from __future__ import annotations

from nowdo_cli.models.core import ThemeMode, UserSettingsUpdate
from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.services.api.user_records import UserRecordsAPI
from nowdo_cli.store import SetThemeMode, Store
from nowdo_cli.store.state import ColorScheme, ThemeState
from nowdo_cli.utils.logger import get_logger

logger = get_logger("theme")

DEFAULT_THEME_MODE: ThemeMode = "dark"


def compute_is_dark(mode: ThemeMode, system_scheme: ColorScheme | None) -> bool:
    return ThemeState(mode=mode, system_scheme=system_scheme).is_dark


class ThemeService:
    """Loads and saves the user's theme preference."""

    def __init__(self, records: UserRecordsAPI, store: Store):
        self.records = records
        self.store = store

    async def resolve_mode(self, user_id: str | None) -> ThemeMode:
        """Theme mode for ``user_id``; ``dark`` without a user or on failure."""
        if not user_id:
            return DEFAULT_THEME_MODE
        try:
            settings = await self.records.get_settings(user_id)
        except RemoteError as e:
            logger.warning(
                "using %s theme, settings unavailable: %s", DEFAULT_THEME_MODE, e
            )
            return DEFAULT_THEME_MODE
        return settings.theme_preference or DEFAULT_THEME_MODE

    async def load_for_user(self, user_id: str | None) -> ThemeMode:
        """Resolve the theme mode and apply it to the store."""
        mode = await self.resolve_mode(user_id)
        self.store.dispatch(SetThemeMode(mode))
        return mode

    async def set_mode(self, user_id: str, mode: ThemeMode) -> ThemeMode:
        """Persist ``mode`` as the user's theme and apply it."""
        settings = await self.records.update_settings(
            user_id, UserSettingsUpdate(theme_preference=mode)
        )
        self.store.dispatch(SetThemeMode(settings.theme_preference))
        return settings.theme_preference
