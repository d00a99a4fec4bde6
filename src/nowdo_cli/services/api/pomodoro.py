"""Pomodoro sessions API endpoints."""

from __future__ import annotations

from nowdo_cli.models.core import (
    DateRange,
    PomodoroSession,
    PomodoroSessionCreate,
    PomodoroSessionUpdate,
)
from nowdo_cli.models.patch import Patch
from nowdo_cli.services.api.client import APIClient, remote_operation
from nowdo_cli.services.api.query import Query, prefer, rows_of, single_row
from nowdo_cli.services.api.tasks import DEFAULT_PAGE_SIZE, to_patch

SESSIONS_TABLE = "user_pomodoro_sessions"


class PomodoroAPI:
    """Pomodoro sessions API client."""

    def __init__(self, client: APIClient):
        self.client = client

    @remote_operation("fetch pomodoro sessions")
    async def list_sessions(
        self,
        user_id: str,
        *,
        limit: int | None = None,
        offset: int | None = None,
        date_range: DateRange | None = None,
    ) -> list[PomodoroSession]:
        """List sessions by start time, most recent first."""
        query = Query(SESSIONS_TABLE).select().eq("user_id", user_id)
        if date_range:
            query.between("start_time", date_range.start, date_range.end)
        query.order("start_time", descending=True)

        if limit:
            query.limit(limit)
        if offset:
            if not limit:
                query.limit(DEFAULT_PAGE_SIZE)
            query.offset(offset)

        response = await self.client.get(query.path, params=query.params)
        return [PomodoroSession.model_validate(row) for row in rows_of(response)]

    @remote_operation("create pomodoro session")
    async def create_session(
        self, user_id: str, session: PomodoroSessionCreate
    ) -> PomodoroSession:
        row = session.model_dump(mode="json", by_alias=True)
        row["user_id"] = user_id
        response = await self.client.post(
            Query(SESSIONS_TABLE).path, json=row, headers=prefer()
        )
        return PomodoroSession.model_validate(single_row(response))

    async def update_session(
        self,
        user_id: str,
        session_id: str,
        update: PomodoroSessionUpdate | Patch,
    ) -> PomodoroSession:
        """Patch the end time and/or completion flag of a session."""
        if isinstance(update, Patch):
            unknown = set(update) - set(PomodoroSessionUpdate.model_fields)
            if unknown:
                raise ValueError(
                    f"Only end_time and completed can change, got: {sorted(unknown)}"
                )
        return await self._update_session(user_id, session_id, to_patch(update))

    @remote_operation("update pomodoro session")
    async def _update_session(
        self, user_id: str, session_id: str, patch: Patch
    ) -> PomodoroSession:
        query = Query(SESSIONS_TABLE).eq("id", session_id).eq("user_id", user_id)
        response = await self.client.patch(
            query.path, json=patch.to_dict(), params=query.params, headers=prefer()
        )
        return PomodoroSession.model_validate(single_row(response))

    @remote_operation("delete pomodoro session")
    async def delete_session(self, user_id: str, session_id: str) -> None:
        query = Query(SESSIONS_TABLE).eq("id", session_id).eq("user_id", user_id)
        await self.client.delete(query.path, params=query.params)
