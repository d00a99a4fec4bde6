"""User-data aggregator.

Loads the four user collections concurrently whenever a user signs in and
reports each completed fetch on the event bus. Fetch failures are isolated:
a failing collection is reported in :class:`SyncResult` while its siblings
keep running.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.services.api.client import APIClient
from nowdo_cli.services.api.habits import HabitsAPI
from nowdo_cli.services.api.pomodoro import PomodoroAPI
from nowdo_cli.services.api.tasks import TasksAPI
from nowdo_cli.services.events import AuthChanged, Collection, EventBus, FetchSettled
from nowdo_cli.utils.logger import get_logger

logger = get_logger("sync")


class SyncResult:
    """Result of loading a user's data."""

    def __init__(self, user_id: str | None):
        """Initialize sync result."""
        self.user_id = user_id
        self.counts: dict[Collection, int] = {}
        self.errors: dict[Collection, RemoteError] = {}

        self.success = False
        self.error: str | None = None
        self.duration: float = 0.0

    def raise_for_error(self) -> None:
        """Re-raise the first fetch error, if any."""
        for error in self.errors.values():
            raise error


class UserDataSync:
    """Fetches tasks, habits, completions and pomodoro sessions per user.

    Fetch tasks are keyed by (user id, collection). When the signed-in user
    changes, every outstanding task of the previous user is cancelled before
    the new user's fetches start.
    """

    def __init__(
        self,
        client: APIClient,
        bus: EventBus,
        *,
        pomodoro_limit: int | None = None,
    ):
        self.tasks_api = TasksAPI(client)
        self.habits_api = HabitsAPI(client)
        self.pomodoro_api = PomodoroAPI(client)
        self.bus = bus
        self.pomodoro_limit = (
            pomodoro_limit or client.config.sync.pomodoro_history_limit
        )

        self.user_id: str | None = None
        self.results: dict[Collection, tuple[Any, ...]] = {}
        self.errors: dict[Collection, RemoteError] = {}
        self._tasks: dict[tuple[str, Collection], asyncio.Task] = {}
        self._started_at = 0.0
        self._finished_at: float | None = None

        self._unsubscribe = bus.subscribe(AuthChanged, self._on_auth_changed)

    @property
    def loading(self) -> bool:
        """True while any fetch for the current user is outstanding."""
        return any(
            not task.done()
            for (user_id, _), task in self._tasks.items()
            if user_id == self.user_id
        )

    async def _list_recent_sessions(self, user_id: str) -> list:
        return await self.pomodoro_api.list_sessions(
            user_id, limit=self.pomodoro_limit
        )

    def _fetcher(self, collection: Collection) -> Callable[[str], Awaitable[list]]:
        fetchers: dict[Collection, Callable[[str], Awaitable[list]]] = {
            Collection.TASKS: self.tasks_api.list_tasks,
            Collection.HABITS: self.habits_api.list_habits,
            Collection.HABIT_COMPLETIONS: self.habits_api.list_completions,
            Collection.POMODORO_SESSIONS: self._list_recent_sessions,
        }
        return fetchers[collection]

    async def _on_auth_changed(self, event: AuthChanged) -> None:
        if event.user_id == self.user_id:
            return
        self.cancel()
        self.user_id = event.user_id
        self.results = {}
        self.errors = {}
        if event.user_id:
            self.start(event.user_id)

    def start(self, user_id: str) -> None:
        """Start one fetch task per collection for ``user_id``."""
        self.user_id = user_id
        self._started_at = time.monotonic()
        self._finished_at = None
        for collection in Collection:
            key = (user_id, collection)
            self._tasks[key] = asyncio.create_task(
                self._run(user_id, collection),
                name=f"fetch-{collection.value}-{user_id}",
            )

    def cancel(self) -> None:
        """Cancel every outstanding fetch."""
        for (user_id, collection), task in self._tasks.items():
            if not task.done():
                logger.info("cancelling %s fetch for %s", collection.value, user_id)
                task.cancel()
        self._tasks = {}

    async def _run(self, user_id: str, collection: Collection) -> None:
        logger.info("fetching %s for %s", collection.value, user_id)
        try:
            rows = await self._fetcher(collection)(user_id)
        except RemoteError as e:
            if user_id != self.user_id:
                return
            self.errors[collection] = e
            logger.error("%s fetch failed: %s", collection.value, e)
            await self.bus.publish(FetchSettled(user_id, collection, error=e))
            return

        if user_id != self.user_id:
            return
        self.results[collection] = tuple(rows)
        logger.info("fetched %d %s for %s", len(rows), collection.value, user_id)
        await self.bus.publish(FetchSettled(user_id, collection, rows=tuple(rows)))

    async def wait(self) -> SyncResult:
        """Wait for the current user's fetches and summarize them."""
        user_id = self.user_id
        tasks = [task for (uid, _), task in self._tasks.items() if uid == user_id]
        if tasks:
            await asyncio.wait(tasks)
            for task in tasks:
                if not task.cancelled() and task.exception() is not None:
                    raise task.exception()
        if self._finished_at is None:
            self._finished_at = time.monotonic()
        return self.result()

    def result(self) -> SyncResult:
        result = SyncResult(self.user_id)
        result.counts = {c: len(rows) for c, rows in self.results.items()}
        result.errors = dict(self.errors)
        result.success = self.user_id is not None and not self.errors
        if self.errors:
            result.error = "; ".join(e.message for e in self.errors.values())
        end = self._finished_at or time.monotonic()
        result.duration = end - self._started_at if self._started_at else 0.0
        return result

    def close(self) -> None:
        """Stop listening for auth changes and cancel outstanding fetches."""
        self._unsubscribe()
        self.cancel()
