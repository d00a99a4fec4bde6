"""Authentication API endpoints (GoTrue)."""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import urlencode

from nowdo_cli.models.core import AuthSession, AuthUser
from nowdo_cli.models.exceptions import AuthError
from nowdo_cli.services.api.client import APIClient, remote_operation

AUTH_PREFIX = "/auth/v1"


def session_from_token_response(data: dict[str, Any]) -> AuthSession:
    """Build a session from a token grant response.

    ``expires_at`` is absolute (epoch seconds); older servers only send
    ``expires_in``.
    """
    if not data.get("expires_at") and data.get("expires_in"):
        data = {**data, "expires_at": int(time.time()) + int(data["expires_in"])}
    return AuthSession.model_validate(data)


class AuthAPI:
    """Auth API client."""

    def __init__(self, client: APIClient):
        self.client = client

    @staticmethod
    def _bearer(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    @remote_operation("sign up", error_cls=AuthError)
    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        data: dict[str, Any] | None = None,
    ) -> tuple[AuthUser | None, AuthSession | None]:
        """Register a user.

        Returns the new user and, when email confirmation is disabled on the
        server, the session it started.
        """
        response = await self.client.post(
            f"{AUTH_PREFIX}/signup",
            json={"email": email, "password": password, "data": data or {}},
            skip_auth=True,
        )
        body = response.json()
        if body.get("access_token"):
            session = session_from_token_response(body)
            return session.user, session
        user_data = body.get("user") or body
        user = AuthUser.model_validate(user_data) if user_data.get("id") else None
        return user, None

    @remote_operation("sign in", error_cls=AuthError)
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self.client.post(
            f"{AUTH_PREFIX}/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            skip_auth=True,
        )
        return session_from_token_response(response.json())

    @remote_operation("refresh session", error_cls=AuthError)
    async def refresh_session(self, refresh_token: str) -> AuthSession:
        response = await self.client.post(
            f"{AUTH_PREFIX}/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
            skip_auth=True,
        )
        return session_from_token_response(response.json())

    @remote_operation("exchange code for session", error_cls=AuthError)
    async def exchange_code_for_session(
        self, auth_code: str, code_verifier: str
    ) -> AuthSession:
        response = await self.client.post(
            f"{AUTH_PREFIX}/token",
            params={"grant_type": "pkce"},
            json={"auth_code": auth_code, "code_verifier": code_verifier},
            skip_auth=True,
        )
        return session_from_token_response(response.json())

    @remote_operation("get user", error_cls=AuthError)
    async def get_user(self, access_token: str) -> AuthUser:
        response = await self.client.get(
            f"{AUTH_PREFIX}/user", headers=self._bearer(access_token)
        )
        return AuthUser.model_validate(response.json())

    @remote_operation("sign out", error_cls=AuthError)
    async def sign_out(self, access_token: str, scope: str = "global") -> None:
        await self.client.post(
            f"{AUTH_PREFIX}/logout",
            params={"scope": scope},
            headers=self._bearer(access_token),
        )

    @remote_operation("send password reset", error_cls=AuthError)
    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        await self.client.post(
            f"{AUTH_PREFIX}/recover",
            params={"redirect_to": redirect_to},
            json={"email": email},
            skip_auth=True,
        )

    def authorize_url(
        self,
        provider: str,
        *,
        redirect_to: str,
        code_challenge: str,
        query_params: dict[str, str] | None = None,
    ) -> str:
        """URL the browser opens to start a provider sign-in."""
        params = {
            "provider": provider,
            "redirect_to": redirect_to,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
        }
        params.update(query_params or {})
        return f"{self.client.base_url}{AUTH_PREFIX}/authorize?{urlencode(params)}"
