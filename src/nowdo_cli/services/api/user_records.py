"""Per-user singleton records: preferences, profile and settings.

Each user owns at most one row in each of these tables (unique on
``user_id``). Reads never return "nothing": a missing row is created with
defaults on first access. Creation goes through a conflict-ignoring insert,
so two concurrent first reads still produce exactly one row.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from nowdo_cli.models.core import (
    UserPreferences,
    UserPreferencesUpdate,
    UserProfile,
    UserProfileUpdate,
    UserSettings,
    UserSettingsUpdate,
)
from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.models.patch import Patch
from nowdo_cli.services.api.client import APIClient, remote_operation
from nowdo_cli.services.api.query import Query, prefer, rows_of, single_row
from nowdo_cli.services.api.tasks import to_patch
from nowdo_cli.utils.logger import get_logger

logger = get_logger("api.user_records")

PREFERENCES_TABLE = "user_preferences"
PROFILES_TABLE = "user_profiles"
SETTINGS_TABLE = "user_settings"

_SERVER_COLUMNS = {"id", "created_at", "updated_at"}


def default_row(model: type[BaseModel], user_id: str, **extra: Any) -> dict[str, Any]:
    """Default row of a singleton table, without server-generated columns."""
    record = model(user_id=user_id, **extra)
    return record.model_dump(mode="json", exclude=_SERVER_COLUMNS, exclude_none=True)


class UserRecordsAPI:
    """Preferences, profile and settings API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def _select_one(self, table: str, user_id: str) -> dict[str, Any] | None:
        query = Query(table).select().eq("user_id", user_id)
        rows = rows_of(await self.client.get(query.path, params=query.params))
        return rows[0] if rows else None

    async def get_or_create(
        self, table: str, user_id: str, defaults: dict[str, Any]
    ) -> dict[str, Any]:
        """Return the user's row in ``table``, inserting ``defaults`` if absent."""
        row = await self._select_one(table, user_id)
        if row is not None:
            return row

        insert = Query(table).on_conflict("user_id")
        response = await self.client.post(
            insert.path,
            json=defaults,
            params=insert.params,
            headers=prefer(resolution="ignore-duplicates"),
        )
        created = rows_of(response)
        if created:
            logger.info("created default %s row for user %s", table, user_id)
            return created[0]

        # Lost the race: another caller inserted first.
        row = await self._select_one(table, user_id)
        if row is None:
            raise RemoteError(f"No {table} row for user after insert", status_code=404)
        return row

    async def _patch_one(
        self, table: str, user_id: str, patch: Patch
    ) -> dict[str, Any]:
        query = Query(table).eq("user_id", user_id)
        response = await self.client.patch(
            query.path, json=patch.to_dict(), params=query.params, headers=prefer()
        )
        return single_row(response)

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    @remote_operation("fetch user preferences")
    async def get_preferences(self, user_id: str) -> UserPreferences:
        row = await self.get_or_create(
            PREFERENCES_TABLE, user_id, default_row(UserPreferences, user_id)
        )
        return UserPreferences.model_validate(row)

    async def update_preferences(
        self, user_id: str, update: UserPreferencesUpdate | Patch
    ) -> UserPreferences:
        return await self._update_preferences(user_id, to_patch(update))

    @remote_operation("update user preferences")
    async def _update_preferences(self, user_id: str, patch: Patch) -> UserPreferences:
        await self.get_or_create(
            PREFERENCES_TABLE, user_id, default_row(UserPreferences, user_id)
        )
        row = await self._patch_one(PREFERENCES_TABLE, user_id, patch)
        return UserPreferences.model_validate(row)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    @remote_operation("fetch user profile")
    async def get_profile(self, user_id: str, email: str | None = None) -> UserProfile:
        """Return the profile, creating one with just the auth email if absent."""
        row = await self.get_or_create(
            PROFILES_TABLE, user_id, default_row(UserProfile, user_id, email=email)
        )
        return UserProfile.model_validate(row)

    async def update_profile(
        self, user_id: str, update: UserProfileUpdate | Patch
    ) -> UserProfile:
        return await self._update_profile(user_id, to_patch(update))

    @remote_operation("update user profile")
    async def _update_profile(self, user_id: str, patch: Patch) -> UserProfile:
        # Upsert: a profile may not exist yet when it is first edited.
        query = Query(PROFILES_TABLE).on_conflict("user_id")
        body = patch.to_dict()
        body["user_id"] = user_id
        response = await self.client.post(
            query.path,
            json=body,
            params=query.params,
            headers=prefer(resolution="merge-duplicates"),
        )
        return UserProfile.model_validate(single_row(response))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @remote_operation("fetch user settings")
    async def get_settings(self, user_id: str) -> UserSettings:
        row = await self.get_or_create(
            SETTINGS_TABLE, user_id, default_row(UserSettings, user_id)
        )
        return UserSettings.model_validate(row)

    async def update_settings(
        self, user_id: str, update: UserSettingsUpdate | Patch
    ) -> UserSettings:
        return await self._update_settings(user_id, to_patch(update))

    @remote_operation("update user settings")
    async def _update_settings(self, user_id: str, patch: Patch) -> UserSettings:
        await self.get_or_create(
            SETTINGS_TABLE, user_id, default_row(UserSettings, user_id)
        )
        row = await self._patch_one(SETTINGS_TABLE, user_id, patch)
        return UserSettings.model_validate(row)

    @remote_operation("update user profile")
    async def clear_profile_picture_url(self, user_id: str) -> UserProfile:
        """Set ``profile_picture_url`` back to null.

        Patches never carry nulls, so clearing the picture is its own call.
        """
        query = Query(PROFILES_TABLE).eq("user_id", user_id)
        response = await self.client.patch(
            query.path,
            json={"profile_picture_url": None},
            params=query.params,
            headers=prefer(),
        )
        return UserProfile.model_validate(single_row(response))
