"""User-data service - writes through the backend, then updates the store.

Commands call this service rather than the API classes directly so that
every persisted change is reflected in the local store from the row the
backend returned.
"""

from __future__ import annotations

import mimetypes
from datetime import date
from pathlib import Path
from typing import Any

from nowdo_cli.models.core import (
    DateRange,
    Habit,
    HabitCompletion,
    HabitCreate,
    HabitUpdate,
    PomodoroSession,
    PomodoroSessionCreate,
    PomodoroSessionUpdate,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
    UserPreferences,
    UserPreferencesUpdate,
    UserProfile,
    UserProfileUpdate,
    UserSettings,
    UserSettingsUpdate,
)
from nowdo_cli.models.patch import Patch
from nowdo_cli.services.api.client import APIClient
from nowdo_cli.services.api.habits import HabitsAPI
from nowdo_cli.services.api.pomodoro import PomodoroAPI
from nowdo_cli.services.api.rpc import RpcAPI
from nowdo_cli.services.api.storage import StorageAPI
from nowdo_cli.services.api.tasks import TasksAPI, to_patch
from nowdo_cli.services.api.user_records import UserRecordsAPI
from nowdo_cli.store import (
    ClearUserData,
    RemoveHabit,
    RemovePomodoroSession,
    RemoveTask,
    Store,
    UpsertHabit,
    UpsertHabitCompletion,
    UpsertPomodoroSession,
    UpsertTask,
)
from nowdo_cli.utils.logger import get_logger

logger = get_logger("user_data")


class UserDataService:
    """Service for user-owned records.

    All operations are scoped to ``user_id``.
    """

    def __init__(self, client: APIClient, store: Store | None = None):
        """Initialize the service.

        Args:
            client: Backend API client
            store: Store to keep in step with successful writes
        """
        self.tasks_api = TasksAPI(client)
        self.habits_api = HabitsAPI(client)
        self.pomodoro_api = PomodoroAPI(client)
        self.records_api = UserRecordsAPI(client)
        self.storage_api = StorageAPI(client)
        self.rpc_api = RpcAPI(client)
        self.store = store or Store()

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def list_tasks(
        self, user_id: str, filters: TaskFilters | None = None
    ) -> list[Task]:
        return await self.tasks_api.list_tasks(user_id, filters)

    async def search_tasks(
        self, user_id: str, text: str, filters: TaskFilters | None = None
    ) -> list[Task]:
        return await self.tasks_api.search_tasks(user_id, text, filters)

    async def add_task(self, user_id: str, task: TaskCreate) -> Task:
        created = await self.tasks_api.create_task(user_id, task)
        self.store.dispatch(UpsertTask(created))
        return created

    async def update_task(
        self, user_id: str, task_id: str, update: TaskUpdate | Patch
    ) -> Task:
        """Update a task remotely and store the row the backend returned."""
        updated = await self.tasks_api.update_task(user_id, task_id, to_patch(update))
        self.store.dispatch(UpsertTask(updated))
        return updated

    async def delete_task(self, user_id: str, task_id: str) -> None:
        await self.tasks_api.delete_task(user_id, task_id)
        self.store.dispatch(RemoveTask(task_id))

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------

    async def list_habits(self, user_id: str) -> list[Habit]:
        return await self.habits_api.list_habits(user_id)

    async def search_habits(self, user_id: str, text: str) -> list[Habit]:
        return await self.habits_api.search_habits(user_id, text)

    async def add_habit(self, user_id: str, habit: HabitCreate) -> Habit:
        created = await self.habits_api.create_habit(user_id, habit)
        self.store.dispatch(UpsertHabit(created))
        return created

    async def update_habit(
        self, user_id: str, habit_id: str, update: HabitUpdate | Patch
    ) -> Habit:
        updated = await self.habits_api.update_habit(user_id, habit_id, update)
        self.store.dispatch(UpsertHabit(updated))
        return updated

    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        await self.habits_api.delete_habit(user_id, habit_id)
        self.store.dispatch(RemoveHabit(habit_id))

    async def list_completions(
        self,
        user_id: str,
        habit_id: str | None = None,
        date_range: DateRange | None = None,
    ) -> list[HabitCompletion]:
        return await self.habits_api.list_completions(user_id, habit_id, date_range)

    async def toggle_completion(
        self, user_id: str, habit_id: str, day: date
    ) -> HabitCompletion:
        completion = await self.habits_api.toggle_completion(user_id, habit_id, day)
        self.store.dispatch(UpsertHabitCompletion(completion))
        return completion

    # ------------------------------------------------------------------
    # Pomodoro
    # ------------------------------------------------------------------

    async def list_sessions(
        self,
        user_id: str,
        *,
        limit: int | None = None,
        offset: int | None = None,
        date_range: DateRange | None = None,
    ) -> list[PomodoroSession]:
        return await self.pomodoro_api.list_sessions(
            user_id, limit=limit, offset=offset, date_range=date_range
        )

    async def log_session(
        self, user_id: str, session: PomodoroSessionCreate
    ) -> PomodoroSession:
        created = await self.pomodoro_api.create_session(user_id, session)
        self.store.dispatch(UpsertPomodoroSession(created))
        return created

    async def update_session(
        self,
        user_id: str,
        session_id: str,
        update: PomodoroSessionUpdate | Patch,
    ) -> PomodoroSession:
        updated = await self.pomodoro_api.update_session(user_id, session_id, update)
        self.store.dispatch(UpsertPomodoroSession(updated))
        return updated

    async def delete_session(self, user_id: str, session_id: str) -> None:
        await self.pomodoro_api.delete_session(user_id, session_id)
        self.store.dispatch(RemovePomodoroSession(session_id))

    # ------------------------------------------------------------------
    # Preferences, profile and settings
    # ------------------------------------------------------------------

    async def get_preferences(self, user_id: str) -> UserPreferences:
        return await self.records_api.get_preferences(user_id)

    async def update_preferences(
        self, user_id: str, update: UserPreferencesUpdate | Patch
    ) -> UserPreferences:
        return await self.records_api.update_preferences(user_id, update)

    async def get_profile(self, user_id: str, email: str | None = None) -> UserProfile:
        return await self.records_api.get_profile(user_id, email)

    async def update_profile(
        self, user_id: str, update: UserProfileUpdate | Patch
    ) -> UserProfile:
        return await self.records_api.update_profile(user_id, update)

    async def get_settings(self, user_id: str) -> UserSettings:
        return await self.records_api.get_settings(user_id)

    async def update_settings(
        self, user_id: str, update: UserSettingsUpdate | Patch
    ) -> UserSettings:
        return await self.records_api.update_settings(user_id, update)

    async def upload_profile_picture(self, user_id: str, path: Path) -> UserProfile:
        """Upload ``path`` as the user's picture and point the profile at it."""
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        url = await self.storage_api.upload_profile_picture(
            user_id, path.name, path.read_bytes(), content_type
        )
        logger.info("uploaded profile picture for %s", user_id)
        return await self.records_api.update_profile(
            user_id, UserProfileUpdate(profile_picture_url=url)
        )

    async def remove_profile_picture(self, user_id: str) -> UserProfile:
        """Delete the stored picture, if any, and clear it from the profile."""
        profile = await self.records_api.get_profile(user_id)
        if not profile.profile_picture_url:
            return profile
        await self.storage_api.delete_profile_picture(profile.profile_picture_url)
        return await self.records_api.clear_profile_picture_url(user_id)

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    async def clear_user_data(self, user_id: str) -> Any:
        """Wipe the user's data on the server and in the store."""
        result = await self.rpc_api.clear_user_data(user_id)
        self.store.dispatch(ClearUserData())
        logger.info("cleared user data for %s", user_id)
        return result

    async def get_data_summary(self, user_id: str) -> dict[str, Any]:
        return await self.rpc_api.get_user_data_summary(user_id)
