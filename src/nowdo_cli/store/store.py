"""Single-owner store: dispatch runs the reducer and notifies subscribers."""

from __future__ import annotations

from collections.abc import Callable

from nowdo_cli.store.actions import Action
from nowdo_cli.store.reducer import reduce
from nowdo_cli.store.state import AppState
from nowdo_cli.utils.logger import get_logger

logger = get_logger("store")

Listener = Callable[[AppState, Action], None]


class Store:
    def __init__(self, state: AppState | None = None):
        self._state = state or AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        logger.debug("dispatched %s", type(action).__name__)
        for listener in list(self._listeners):
            listener(self._state, action)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every dispatch; returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
