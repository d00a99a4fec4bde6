"""In-process event bus connecting auth, data sync and the app shell."""

from __future__ import annotations

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.utils.logger import get_logger

logger = get_logger("events")


class Collection(str, Enum):
    """User-data collections loaded after sign-in."""

    TASKS = "tasks"
    HABITS = "habits"
    HABIT_COMPLETIONS = "habit_completions"
    POMODORO_SESSIONS = "pomodoro_sessions"


@dataclass(frozen=True)
class AuthChanged:
    """Auth has settled, or the signed-in user changed.

    ``user_id`` is None when nobody is signed in.
    """

    user_id: str | None
    email: str | None = None


@dataclass(frozen=True)
class FetchSettled:
    """One collection fetch for one user finished, with rows or an error."""

    user_id: str
    collection: Collection
    rows: tuple[Any, ...] = ()
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


Handler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    """Publish/subscribe by event type.

    Handlers run in subscription order. A failing handler is logged and does
    not stop the remaining handlers.
    """

    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` and return a function that unregisters it."""
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    async def publish(self, event: Any) -> None:
        for handler in list(self._handlers[type(event)]):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "event handler %r failed for %s", handler, type(event).__name__
                )
