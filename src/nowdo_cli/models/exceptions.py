"""Custom exceptions for NowDo."""

from __future__ import annotations


class NowDoError(Exception):
    """Base exception for all NowDo errors."""


class RemoteError(NowDoError):
    """Raised when a read or write against the hosted backend fails.

    Carries the human-readable backend message plus the HTTP status and the
    backend error code when they are known. Callers never get an automatic
    retry: every failure surfaces here.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def with_operation(self, operation: str) -> "RemoteError":
        """Return a copy of this error prefixed with the failed operation."""
        return type(self)(
            f"Failed to {operation}: {self.message}",
            status_code=self.status_code,
            code=self.code,
        )


class AuthError(RemoteError):
    """Raised when sign-in, sign-up, session restore or OAuth fails."""


class NotAuthenticatedError(NowDoError):
    """Raised when a user-scoped operation runs without a signed-in user."""
