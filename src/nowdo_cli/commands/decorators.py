"""Decorators for command functions."""

import asyncio
import functools
import time
from collections.abc import Callable

import typer

from nowdo_cli.models.exceptions import AuthError, NotAuthenticatedError, RemoteError
from nowdo_cli.services.auth_service import AuthService
from nowdo_cli.utils.exit_codes import (
    ERROR_AUTH_FAILURE,
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NETWORK,
    get_exit_code_name,
)
from nowdo_cli.utils.logger import get_logger
from nowdo_cli.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


# Errors whose message is shown as-is; anything else is unexpected.
USER_FACING_ERRORS = (AppError, RemoteError, NotAuthenticatedError, ValueError)


def _require_auth() -> None:
    """Require a stored session before running the command."""
    if not AuthService.is_authenticated():
        raise AppError(
            "Not logged in. Use 'nowdo auth login' to authenticate.",
            exit_code=ERROR_AUTH_FAILURE,
        )


def _exit_code_for(error: Exception) -> int:
    if isinstance(error, AppError):
        return error.exit_code
    if isinstance(error, (AuthError, NotAuthenticatedError)):
        return ERROR_AUTH_FAILURE
    if isinstance(error, RemoteError):
        return ERROR_NETWORK
    if isinstance(error, ValueError):
        return ERROR_INVALID_ARGS
    return ERROR_GENERAL


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = True):
    """Run a (possibly async) command, logging it and mapping errors to exit codes.

    Usable bare (``@command_wrapper``) or with options
    (``@command_wrapper(auth_required=False)``).
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if auth_required:
                    _require_auth()
                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)
            except typer.Exit:
                raise
            except Exception as e:
                code = _exit_code_for(e)
                elapsed = time.monotonic() - start
                expected = isinstance(e, USER_FACING_ERRORS)
                logger.error(
                    "command failed: %s (%.3fs) %s - %s",
                    cmd,
                    elapsed,
                    get_exit_code_name(code),
                    e,
                    exc_info=not expected,
                )
                if expected:
                    format_error(str(e))
                else:
                    format_error(f"An unexpected error occurred: {e}")
                raise typer.Exit(code=code) from e

            logger.info("command completed: %s (%.3fs)", cmd, time.monotonic() - start)
            return result

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
