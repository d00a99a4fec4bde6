"""App shell: start-up sequencing, navigation and store dispatch.

The shell reacts to two events:

- ``AuthChanged``: settles the auth phase, loads the user's theme and makes
  one navigation decision per settle.
- ``FetchSettled``: moves freshly fetched rows into the store.

Payment configuration runs once from :meth:`AppShell.start`.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from nowdo_cli.models.config_models import PaymentsConfig, Platform
from nowdo_cli.services.api.client import APIClient
from nowdo_cli.services.api.user_records import UserRecordsAPI
from nowdo_cli.services.auth_service import AuthService
from nowdo_cli.services.events import AuthChanged, Collection, EventBus, FetchSettled
from nowdo_cli.services.navigation import (
    MAIN_ROUTE,
    SIGN_IN_ROUTE,
    Navigator,
    is_auth_path,
)
from nowdo_cli.services.payments import PaymentsSDK, configure_payments
from nowdo_cli.services.sync_service import UserDataSync
from nowdo_cli.services.theme_service import ThemeService
from nowdo_cli.store import (
    LoadHabitCompletions,
    LoadHabits,
    LoadPomodoroSessions,
    LoadTasks,
    SetSystemScheme,
    Store,
)
from nowdo_cli.store.state import ColorScheme
from nowdo_cli.utils.logger import get_logger

logger = get_logger("shell")

_HABIT_COLLECTIONS = (Collection.HABITS, Collection.HABIT_COMPLETIONS)


class Phase(str, Enum):
    RESOLVING_AUTH = "resolving-auth"
    SETTLED_UNAUTHENTICATED = "settled-unauthenticated"
    SETTLED_AUTHENTICATED = "settled-authenticated"


class AppShell:
    """Root of the running app."""

    def __init__(
        self,
        *,
        bus: EventBus,
        auth: AuthService,
        sync: UserDataSync,
        theme: ThemeService,
        store: Store,
        navigator: Navigator,
        platform: Platform = Platform.WEB,
        payments_config: PaymentsConfig | None = None,
        payments_sdk: PaymentsSDK | None = None,
    ):
        self.bus = bus
        self.auth = auth
        self.sync = sync
        self.theme = theme
        self.store = store
        self.navigator = navigator
        self.platform = platform
        self.payments_config = payments_config or PaymentsConfig()
        self.payments_sdk = payments_sdk

        self.phase = Phase.RESOLVING_AUTH
        self.has_navigated = False
        self.user_id: str | None = None
        self.payments_configured = False

        self._theme_task: asyncio.Task | None = None
        self._habit_settles: dict[Collection, FetchSettled] = {}
        self._unsubscribers = [
            bus.subscribe(AuthChanged, self._on_auth_changed),
            bus.subscribe(FetchSettled, self._on_fetch_settled),
        ]

    async def start(self, system_scheme: ColorScheme | None = None) -> None:
        """Configure payments, apply the OS color scheme and restore auth."""
        self.store.dispatch(SetSystemScheme(system_scheme))
        self.payments_configured = await configure_payments(
            self.payments_sdk, self.platform, self.payments_config
        )
        await self.auth.restore()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def _on_auth_changed(self, event: AuthChanged) -> None:
        first_settle = self.phase is Phase.RESOLVING_AUTH
        user_changed = event.user_id != self.user_id

        if first_settle or user_changed:
            self.has_navigated = False
            self._habit_settles.clear()
            self._load_theme(event.user_id)

        self.user_id = event.user_id
        self.phase = (
            Phase.SETTLED_AUTHENTICATED
            if event.user_id
            else Phase.SETTLED_UNAUTHENTICATED
        )
        self._navigate_once()

    def _navigate_once(self) -> None:
        if self.has_navigated:
            return

        if self.user_id is None:
            current_path = getattr(self.navigator, "current_path", None)
            if self.platform.is_web and is_auth_path(current_path):
                logger.info("already on auth screen %s, staying", current_path)
            else:
                logger.info("navigating to %s", SIGN_IN_ROUTE)
                self.navigator.replace(SIGN_IN_ROUTE)
        else:
            logger.info("navigating to %s", MAIN_ROUTE)
            self.navigator.replace(MAIN_ROUTE)

        self.has_navigated = True

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    def _load_theme(self, user_id: str | None) -> None:
        if self._theme_task is not None and not self._theme_task.done():
            self._theme_task.cancel()
        self._theme_task = asyncio.create_task(
            self.theme.load_for_user(user_id), name=f"theme-{user_id}"
        )

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    async def _on_fetch_settled(self, event: FetchSettled) -> None:
        if event.user_id != self.user_id:
            logger.debug("ignoring %s settle for stale user", event.collection.value)
            return

        match event.collection:
            case Collection.TASKS:
                if event.ok:
                    self.store.dispatch(LoadTasks(event.rows))
            case Collection.POMODORO_SESSIONS:
                if event.ok:
                    self.store.dispatch(LoadPomodoroSessions(event.rows))
            case Collection.HABITS | Collection.HABIT_COMPLETIONS:
                self._habit_settles[event.collection] = event
                if all(c in self._habit_settles for c in _HABIT_COLLECTIONS):
                    self._dispatch_habits()

    def _dispatch_habits(self) -> None:
        habits = self._habit_settles.pop(Collection.HABITS)
        completions = self._habit_settles.pop(Collection.HABIT_COMPLETIONS)

        if habits.ok:
            rows = (
                completions.rows
                if completions.ok
                else self.store.state.habits.completions
            )
            self.store.dispatch(LoadHabits(habits.rows, rows))
        elif completions.ok:
            self.store.dispatch(LoadHabitCompletions(completions.rows))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait for the pending theme load and the current user's fetches."""
        await self.sync.wait()
        task = self._theme_task
        if task is not None:
            await asyncio.wait([task])
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        if self._theme_task is not None and not self._theme_task.done():
            self._theme_task.cancel()
        self.sync.close()


def build_app_shell(
    client: APIClient,
    navigator: Navigator,
    *,
    store: Store | None = None,
    payments_sdk: PaymentsSDK | None = None,
) -> AppShell:
    """Wire the auth service, aggregator, theme service and store together."""
    config = client.config
    bus = EventBus()
    store = store or Store()
    sync = UserDataSync(client, bus)
    auth = AuthService(client, bus)
    theme = ThemeService(UserRecordsAPI(client), store)
    return AppShell(
        bus=bus,
        auth=auth,
        sync=sync,
        theme=theme,
        store=store,
        navigator=navigator,
        platform=config.app.platform,
        payments_config=config.payments,
        payments_sdk=payments_sdk,
    )
