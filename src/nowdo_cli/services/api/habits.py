"""Habits and habit completions API endpoints."""

from __future__ import annotations

from datetime import date

from nowdo_cli.models.core import (
    DateRange,
    Habit,
    HabitCompletion,
    HabitCreate,
    HabitUpdate,
)
from nowdo_cli.models.patch import Patch
from nowdo_cli.services.api.client import APIClient, remote_operation
from nowdo_cli.services.api.query import Query, prefer, rows_of, single_row
from nowdo_cli.services.api.tasks import DEFAULT_SEARCH_LIMIT, to_patch

HABITS_TABLE = "user_habits"
COMPLETIONS_TABLE = "user_habit_completions"


class HabitsAPI:
    """Habits API client."""

    def __init__(self, client: APIClient):
        self.client = client

    @remote_operation("fetch habits")
    async def list_habits(self, user_id: str) -> list[Habit]:
        """List the user's habits, newest first."""
        query = (
            Query(HABITS_TABLE)
            .select()
            .eq("user_id", user_id)
            .order("created_at", descending=True)
        )
        response = await self.client.get(query.path, params=query.params)
        return [Habit.model_validate(row) for row in rows_of(response)]

    @remote_operation("search habits")
    async def search_habits(self, user_id: str, text: str) -> list[Habit]:
        """Find habits whose title or description contains ``text``."""
        query = (
            Query(HABITS_TABLE)
            .select()
            .eq("user_id", user_id)
            .search(["title", "description"], text)
            .order("updated_at", descending=True)
            .limit(DEFAULT_SEARCH_LIMIT)
        )
        response = await self.client.get(query.path, params=query.params)
        return [Habit.model_validate(row) for row in rows_of(response)]

    @remote_operation("create habit")
    async def create_habit(self, user_id: str, habit: HabitCreate) -> Habit:
        row = habit.model_dump(mode="json")
        row["user_id"] = user_id
        response = await self.client.post(
            Query(HABITS_TABLE).path, json=row, headers=prefer()
        )
        return Habit.model_validate(single_row(response))

    async def update_habit(
        self, user_id: str, habit_id: str, update: HabitUpdate | Patch
    ) -> Habit:
        return await self._update_habit(user_id, habit_id, to_patch(update))

    @remote_operation("update habit")
    async def _update_habit(self, user_id: str, habit_id: str, patch: Patch) -> Habit:
        query = Query(HABITS_TABLE).eq("id", habit_id).eq("user_id", user_id)
        response = await self.client.patch(
            query.path, json=patch.to_dict(), params=query.params, headers=prefer()
        )
        return Habit.model_validate(single_row(response))

    @remote_operation("delete habit")
    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        query = Query(HABITS_TABLE).eq("id", habit_id).eq("user_id", user_id)
        await self.client.delete(query.path, params=query.params)

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    @remote_operation("fetch habit completions")
    async def list_completions(
        self,
        user_id: str,
        habit_id: str | None = None,
        date_range: DateRange | None = None,
    ) -> list[HabitCompletion]:
        """List completions, newest day first, optionally for one habit."""
        query = Query(COMPLETIONS_TABLE).select().eq("user_id", user_id)
        if habit_id:
            query.eq("habit_id", habit_id)
        if date_range:
            query.between("completion_date", date_range.start, date_range.end)
        query.order("completion_date", descending=True)

        response = await self.client.get(query.path, params=query.params)
        return [HabitCompletion.model_validate(row) for row in rows_of(response)]

    @remote_operation("toggle habit completion")
    async def toggle_completion(
        self, user_id: str, habit_id: str, day: date
    ) -> HabitCompletion:
        """Flip the completion of ``habit_id`` on ``day``.

        An existing row has its ``completed`` flag inverted; a missing row is
        created as completed.
        """
        lookup = (
            Query(COMPLETIONS_TABLE)
            .select()
            .eq("user_id", user_id)
            .eq("habit_id", habit_id)
            .eq("completion_date", day)
        )
        response = await self.client.get(lookup.path, params=lookup.params)
        existing = rows_of(response)

        if existing:
            row = existing[0]
            query = (
                Query(COMPLETIONS_TABLE).eq("id", row["id"]).eq("user_id", user_id)
            )
            response = await self.client.patch(
                query.path,
                json={"completed": not row.get("completed", False)},
                params=query.params,
                headers=prefer(),
            )
        else:
            response = await self.client.post(
                Query(COMPLETIONS_TABLE).path,
                json={
                    "user_id": user_id,
                    "habit_id": habit_id,
                    "completion_date": day.isoformat(),
                    "completed": True,
                },
                headers=prefer(),
            )
        return HabitCompletion.model_validate(single_row(response))
