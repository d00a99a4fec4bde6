"""Service for handling authentication state and operations.

:class:`AuthService` owns the signed-in user. It restores the persisted
session once, exposes ``user``/``session``/``loading`` and publishes
:class:`~nowdo_cli.services.events.AuthChanged` whenever auth settles or the
user changes.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nowdo_cli.models.core import AuthSession, AuthUser
from nowdo_cli.models.exceptions import (
    AuthError,
    NotAuthenticatedError,
    NowDoError,
)
from nowdo_cli.services.api.auth import AuthAPI
from nowdo_cli.services.api.client import APIClient
from nowdo_cli.services.config_service import ConfigService, get_config_service
from nowdo_cli.services.events import AuthChanged, EventBus
from nowdo_cli.services.navigation import MAIN_ROUTE, SIGN_IN_ROUTE, Navigator
from nowdo_cli.services.oauth import (
    PROVIDER_QUERY_PARAMS,
    code_challenge,
    generate_code_verifier,
    oauth_redirect_url,
    reset_password_redirect_url,
)
from nowdo_cli.utils.logger import get_logger

logger = get_logger("auth")

# Refresh tokens that expire within this many seconds.
EXPIRY_MARGIN = 10

_MISSING_SESSION_MARKERS = (
    "session_not_found",
    "Session from session_id claim in JWT does not exist",
)


@dataclass(frozen=True)
class AuthState:
    user: AuthUser | None = None
    session: AuthSession | None = None
    loading: bool = True


def _is_missing_session(error: AuthError) -> bool:
    if error.code == "session_not_found":
        return True
    return any(marker in error.message for marker in _MISSING_SESSION_MARKERS)


class AuthService:
    """Service for handling authentication-related operations."""

    def __init__(
        self,
        client: APIClient,
        bus: EventBus | None = None,
        config_service: ConfigService | None = None,
    ):
        self.config_manager = config_service or client.config_manager
        self.auth_api = AuthAPI(client)
        self.bus = bus or EventBus()
        self._state = AuthState()
        self._restored = False
        self._restore_lock = asyncio.Lock()

    @staticmethod
    def is_authenticated() -> bool:
        """Check if a session is stored locally."""
        return get_config_service().load_session() is not None

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> AuthUser | None:
        return self._state.user

    @property
    def session(self) -> AuthSession | None:
        return self._state.session

    @property
    def loading(self) -> bool:
        return self._state.loading

    def require_user(self) -> AuthUser:
        """Return the signed-in user or raise NotAuthenticatedError."""
        if self._state.user is None:
            raise NotAuthenticatedError(
                "Not logged in. Use 'nowdo auth login' to authenticate."
            )
        return self._state.user

    async def _settle(self, user: AuthUser | None, session: AuthSession | None) -> None:
        previous = self._state.user.id if self._state.user else None
        self._state = AuthState(user=user, session=session, loading=False)
        current = user.id if user else None
        if previous != current:
            logger.info("auth changed: %s -> %s", previous, current)
        await self.bus.publish(
            AuthChanged(user_id=current, email=user.email if user else None)
        )

    def _persist(self, session: AuthSession, user: AuthUser) -> AuthSession:
        session = session.model_copy(update={"user": user})
        self.config_manager.save_session(session.model_dump(mode="json"))
        return session

    @staticmethod
    def _is_expired(session: AuthSession) -> bool:
        if session.expires_at is None:
            return False
        return session.expires_at <= time.time() + EXPIRY_MARGIN

    async def restore(self) -> AuthState:
        """Restore the persisted session. Runs once; later calls are no-ops.

        An expired session is refreshed. Any failure drops the stored session
        and settles as signed out.
        """
        async with self._restore_lock:
            if self._restored:
                return self._state
            self._restored = True

            user: AuthUser | None = None
            session: AuthSession | None = None
            stored = self.config_manager.load_session()
            if stored:
                try:
                    session = AuthSession.model_validate(stored)
                    if self._is_expired(session):
                        if not session.refresh_token:
                            raise AuthError("Session expired")
                        logger.info("refreshing expired session")
                        session = await self.auth_api.refresh_session(
                            session.refresh_token
                        )
                    user = await self.auth_api.get_user(session.access_token)
                    session = self._persist(session, user)
                except (NowDoError, ValueError) as e:
                    logger.warning("stored session rejected: %s", e)
                    self.config_manager.clear_session()
                    user, session = None, None

            await self._settle(user, session)
            return self._state

    async def _start_session(self, session: AuthSession) -> AuthUser:
        user = session.user or await self.auth_api.get_user(session.access_token)
        session = self._persist(session, user)
        self._restored = True
        await self._settle(user, session)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        session = await self.auth_api.sign_in_with_password(email, password)
        user = await self._start_session(session)
        logger.info("signed in as %s", user.email)
        return user

    async def sign_up(
        self, email: str, password: str, name: str | None = None
    ) -> AuthUser | None:
        """Register an account.

        When the server starts a session right away the user is signed in;
        otherwise the returned user must confirm their email first.
        """
        data = {"full_name": name} if name else {}
        user, session = await self.auth_api.sign_up(email, password, data=data)
        if session is not None:
            return await self._start_session(session)
        logger.info("signed up %s, awaiting email confirmation", email)
        return user

    async def sign_out(self) -> None:
        """Sign out everywhere and always clear the local session.

        A backend error other than an already-gone session is raised after
        local state has been cleared.
        """
        token = self.session.access_token if self.session else None
        token = token or self.config_manager.load_access_token()
        error: AuthError | None = None
        if token:
            try:
                await self.auth_api.sign_out(token)
            except AuthError as e:
                if _is_missing_session(e):
                    logger.info("session already gone on server")
                else:
                    error = e

        self.config_manager.clear_session()
        self._restored = True
        await self._settle(None, None)
        if error is not None:
            raise error

    def sign_in_with_provider(self, provider: str) -> str:
        """Start a PKCE sign-in and return the URL the browser should open."""
        config = self.config_manager.config
        if provider not in config.auth.oauth_providers:
            raise AuthError(f"{provider} sign-in is not available")

        verifier = generate_code_verifier()
        redirect_to = oauth_redirect_url(config.app)
        self.config_manager.save_pkce_verifier(verifier, redirect_to)
        return self.auth_api.authorize_url(
            provider,
            redirect_to=redirect_to,
            code_challenge=code_challenge(verifier),
            query_params=PROVIDER_QUERY_PARAMS.get(provider),
        )

    async def exchange_code(self, auth_code: str) -> AuthUser:
        """Finish a provider sign-in with the code from the redirect."""
        verifier = self.config_manager.pop_pkce_verifier()
        if not verifier:
            raise AuthError("No sign-in in progress: code verifier not found")
        session = await self.auth_api.exchange_code_for_session(auth_code, verifier)
        return await self._start_session(session)

    async def reset_password(self, email: str) -> None:
        redirect_to = reset_password_redirect_url(self.config_manager.config.app)
        await self.auth_api.reset_password_for_email(email, redirect_to)


class OAuthCallbackHandler:
    """Finishes a provider sign-in after the browser redirect."""

    def __init__(
        self,
        auth: AuthService,
        navigator: Navigator,
        *,
        success_delay: float = 1.0,
        failure_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.auth = auth
        self.navigator = navigator
        self.success_delay = success_delay
        self.failure_delay = failure_delay
        self._sleep = sleep
        self.message: str | None = None

    async def handle(self, code: str | None = None, error: str | None = None) -> bool:
        """Exchange ``code`` if given, then route on the resulting auth state."""
        try:
            if error:
                raise AuthError(error)
            if code:
                await self.auth.exchange_code(code)
            else:
                await self.auth.restore()
        except NowDoError as e:
            logger.error("oauth callback failed: %s", e)

        if self.auth.user is not None:
            self.message = "Successfully signed in"
            await self._sleep(self.success_delay)
            self.navigator.replace(MAIN_ROUTE)
            return True

        self.message = "Authentication failed. Please try again."
        await self._sleep(self.failure_delay)
        self.navigator.replace(SIGN_IN_ROUTE)
        return False
