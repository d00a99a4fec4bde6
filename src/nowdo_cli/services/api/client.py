"""API client for the NowDo hosted backend."""

from __future__ import annotations

import functools
from collections.abc import Callable, Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.services.config_service import ConfigService, get_config_service
from nowdo_cli.utils.logger import get_logger

logger = get_logger("api")

Params = Sequence[tuple[str, str]] | dict[str, Any]

_MESSAGE_KEYS = ("message", "msg", "error_description", "error")


def error_from_response(response: httpx.Response) -> RemoteError:
    """Build a RemoteError from a failed backend response.

    PostgREST, GoTrue and storage each spell their error body differently;
    the first non-empty of ``message``, ``msg``, ``error_description`` and
    ``error`` wins, falling back to the raw body text.
    """
    message = response.text or response.reason_phrase
    code: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in _MESSAGE_KEYS:
            if body.get(key):
                message = str(body[key])
                break
        raw_code = body.get("error_code") or body.get("code")
        if isinstance(raw_code, str):
            code = raw_code

    return RemoteError(message, status_code=response.status_code, code=code)


class APIClient:
    """HTTP client for the NowDo backend."""

    def __init__(
        self,
        config_service: ConfigService | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config_manager = config_service or get_config_service()
        self.config = self.config_manager.config
        self.base_url = self.config.backend.url
        self.anon_key = self.config.backend.anon_key
        self.timeout = self.config.api.timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> APIClient:
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self, skip_auth: bool = False) -> dict[str, str]:
        """Get HTTP headers with the anon key and the bearer token."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "apikey": self.anon_key,
        }

        token = None if skip_auth else self.config_manager.load_access_token()
        headers["Authorization"] = f"Bearer {token or self.anon_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            if not self.config.backend.is_configured:
                raise RemoteError(
                    "Backend is not configured. Set backend.url and "
                    "backend.anon_key or NOWDO_BACKEND_URL and NOWDO_BACKEND_ANON_KEY."
                )
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Params | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make an HTTP request to the backend.

        Failures are never retried. Non-2xx responses and transport errors
        are raised as :class:`RemoteError`.
        """
        client = await self._get_client()
        url = path if path.startswith("/") else f"/{path}"

        request_headers = self._get_headers(skip_auth=skip_auth)
        if headers:
            request_headers.update(headers)

        try:
            response = await client.request(
                method=method,
                url=url,
                json=json,
                params=params,
                content=content,
                headers=request_headers,
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise error_from_response(e.response) from e
        except httpx.RequestError as e:
            raise RemoteError(f"Network error: {e}") from e

    async def get(
        self,
        path: str,
        *,
        params: Params | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        *,
        json: Any = None,
        params: Params | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request(
            "POST",
            path,
            json=json,
            params=params,
            content=content,
            headers=headers,
            skip_auth=skip_auth,
        )

    async def patch(
        self,
        path: str,
        *,
        json: Any = None,
        params: Params | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request(
            "PATCH", path, json=json, params=params, headers=headers
        )

    async def delete(
        self,
        path: str,
        *,
        json: Any = None,
        params: Params | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request(
            "DELETE", path, json=json, params=params, headers=headers
        )


def remote_operation(
    operation: str, *, error_cls: type[RemoteError] = RemoteError
) -> Callable:
    """Prefix any RemoteError raised by the wrapped coroutine with ``operation``.

    ``@remote_operation("fetch tasks")`` turns a backend message ``boom``
    into ``Failed to fetch tasks: boom`` and logs the failure. A row the
    models reject is reported the same way, as a RemoteError.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except RemoteError as e:
                logger.error("failed to %s: %s", operation, e.message)
                err = e.with_operation(operation)
                if not isinstance(err, error_cls):
                    err = error_cls(
                        err.message, status_code=err.status_code, code=err.code
                    )
                raise err from e
            except ValidationError as e:
                logger.error("failed to %s: malformed row: %s", operation, e)
                raise error_cls(
                    f"Failed to {operation}: unexpected data from backend "
                    f"({e.error_count()} invalid field(s))"
                ) from e

        return wrapper

    return decorator


def get_client(
    config_service: ConfigService | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> APIClient:
    """Get an API client instance."""
    return APIClient(config_service, transport=transport)
