"""Routes and the navigator protocol the app shell drives."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

SIGN_IN_ROUTE = "/(auth)/sign-in"
MAIN_ROUTE = "/(tabs)"

_AUTH_PATH_MARKERS = ("/sign-in", "/sign-up", "/forgot-password", "/oauth-callback")


def is_auth_path(path: str | None) -> bool:
    """True when ``path`` already shows one of the sign-in screens."""
    if not path:
        return False
    return any(marker in path for marker in _AUTH_PATH_MARKERS)


@runtime_checkable
class Navigator(Protocol):
    """Router the shell and the OAuth callback navigate with."""

    @property
    def current_path(self) -> str | None: ...

    def replace(self, route: str) -> None: ...
