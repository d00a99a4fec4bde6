"""Unit tests for auth service."""

from urllib.parse import parse_qs, urlparse

import pytest

from fakes import RecordingNavigator, RecordingSleep
from nowdo_cli.models.exceptions import AuthError, NotAuthenticatedError
from nowdo_cli.services.auth_service import AuthService, OAuthCallbackHandler
from nowdo_cli.services.events import AuthChanged, EventBus
from nowdo_cli.services.navigation import MAIN_ROUTE, SIGN_IN_ROUTE
from nowdo_cli.services.oauth import code_challenge


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def auth_events(bus):
    events = []
    bus.subscribe(AuthChanged, events.append)
    return events


@pytest.fixture
def auth(client, bus, config_service):
    return AuthService(client, bus, config_service)


class TestIsAuthenticated:
    def test_is_authenticated_with_no_session(self, mocker):
        mock_config_manager = mocker.patch(
            "nowdo_cli.services.auth_service.get_config_service"
        )
        mock_config_manager.return_value.load_session.return_value = None

        assert AuthService.is_authenticated() is False

    def test_is_authenticated_with_session(self, mocker):
        mock_config_manager = mocker.patch(
            "nowdo_cli.services.auth_service.get_config_service"
        )
        mock_config_manager.return_value.load_session.return_value = {
            "access_token": "dummy-token"
        }

        assert AuthService.is_authenticated() is True


class TestRestore:
    @pytest.mark.asyncio
    async def test_no_stored_session_settles_signed_out(self, auth, auth_events):
        assert auth.loading is True

        state = await auth.restore()

        assert state.user is None
        assert state.loading is False
        assert auth_events == [AuthChanged(user_id=None)]

    @pytest.mark.asyncio
    async def test_valid_session_restores_user(self, auth, auth_events, signed_in):
        await auth.restore()

        assert auth.user.id == signed_in.id
        assert auth.require_user().email == "ada@example.com"
        assert auth_events == [AuthChanged(user_id=signed_in.id, email=signed_in.email)]

    @pytest.mark.asyncio
    async def test_expired_session_is_refreshed(
        self, auth, backend, config_service, user
    ):
        stale = backend.issue_session(backend.users[user.id], expires_in=0)
        config_service.save_session(stale)

        await auth.restore()

        assert auth.user.id == user.id
        stored = config_service.load_session()
        assert stored["access_token"] != stale["access_token"]
        assert stored["user"]["id"] == user.id
        assert len(backend.requests_to("auth/token")) == 1

    @pytest.mark.asyncio
    async def test_rejected_session_is_dropped(self, auth, config_service, backend):
        config_service.save_session({"access_token": "revoked"})

        await auth.restore()

        assert auth.user is None
        assert auth.loading is False
        assert config_service.load_session() is None

    @pytest.mark.asyncio
    async def test_restore_runs_once(self, auth, backend, signed_in):
        await auth.restore()
        await auth.restore()

        assert len(backend.requests_to("auth/user")) == 1

    def test_require_user_without_user(self, auth):
        with pytest.raises(NotAuthenticatedError):
            auth.require_user()


class TestSignIn:
    @pytest.mark.asyncio
    async def test_sign_in_persists_session(
        self, auth, auth_events, config_service, user
    ):
        signed = await auth.sign_in(user.email, "secret123")

        assert signed.id == user.id
        assert auth.session.access_token == config_service.load_access_token()
        assert auth_events[-1].user_id == user.id

    @pytest.mark.asyncio
    async def test_wrong_password_leaves_state(self, auth, auth_events, user):
        with pytest.raises(AuthError, match="Invalid login credentials"):
            await auth.sign_in(user.email, "nope")

        assert auth.user is None
        assert auth_events == []

    @pytest.mark.asyncio
    async def test_sign_up_signs_in_when_session_started(self, auth, auth_events):
        user = await auth.sign_up("new@example.com", "secret123", name="New Person")

        assert auth.user.id == user.id
        assert user.full_name == "New Person"
        assert auth_events[-1].user_id == user.id

    @pytest.mark.asyncio
    async def test_sign_up_awaiting_confirmation(self, auth, auth_events, backend):
        backend.confirm_email = True

        user = await auth.sign_up("new@example.com", "secret123")

        assert user.email == "new@example.com"
        assert auth.user is None
        assert auth_events == []


class TestSignOut:
    @pytest.mark.asyncio
    async def test_sign_out_clears_session(
        self, auth, auth_events, backend, config_service, signed_in
    ):
        await auth.restore()
        token = auth.session.access_token

        await auth.sign_out()

        assert auth.user is None
        assert config_service.load_session() is None
        assert token not in backend.access_tokens
        assert auth_events[-1] == AuthChanged(user_id=None)

    @pytest.mark.asyncio
    async def test_missing_server_session_is_not_an_error(self, auth, config_service):
        config_service.save_session({"access_token": "already-gone"})

        await auth.sign_out()

        assert config_service.load_session() is None

    @pytest.mark.asyncio
    async def test_other_errors_raise_after_local_clear(
        self, auth, backend, config_service, signed_in
    ):
        backend.fail("POST", "auth/logout", status=500, body={"msg": "boom"})

        with pytest.raises(AuthError, match="Failed to sign out: boom"):
            await auth.sign_out()

        assert config_service.load_session() is None
        assert auth.user is None


class TestProviderSignIn:
    def test_sign_in_with_provider_stores_verifier(self, auth, config_service):
        url = auth.sign_in_with_provider("google")

        params = parse_qs(urlparse(url).query)
        pkce = config_service._read_json(config_service.pkce_path)
        assert params["code_challenge"] == [code_challenge(pkce["code_verifier"])]
        assert params["redirect_to"] == ["http://localhost:8081/(auth)/oauth-callback"]
        assert pkce["redirect_to"] == params["redirect_to"][0]
        assert params["access_type"] == ["offline"]

    def test_native_redirect_uses_url_scheme(self, auth, config_service):
        config_service.set("app.platform", "ios")

        url = auth.sign_in_with_provider("google")

        assert parse_qs(urlparse(url).query)["redirect_to"] == [
            "nowdo://(auth)/oauth-callback"
        ]

    def test_unknown_provider_is_rejected(self, auth):
        with pytest.raises(AuthError, match="github sign-in is not available"):
            auth.sign_in_with_provider("github")

    @pytest.mark.asyncio
    async def test_exchange_code_uses_stored_verifier(
        self, auth, backend, config_service, user
    ):
        auth.sign_in_with_provider("google")
        backend.oauth_codes["code-1"] = user.email

        signed = await auth.exchange_code("code-1")

        assert signed.id == user.id
        assert config_service.pop_pkce_verifier() is None

    @pytest.mark.asyncio
    async def test_exchange_without_pending_sign_in(self, auth):
        with pytest.raises(AuthError, match="code verifier not found"):
            await auth.exchange_code("code-1")

    @pytest.mark.asyncio
    async def test_reset_password_redirect(self, auth, backend):
        await auth.reset_password("ada@example.com")

        assert backend.recover_requests[0]["redirect_to"] == (
            "http://localhost:8081/reset-password"
        )


class TestOAuthCallback:
    @pytest.mark.asyncio
    async def test_success_navigates_to_main(self, auth, backend, user):
        auth.sign_in_with_provider("google")
        backend.oauth_codes["code-1"] = user.email
        navigator = RecordingNavigator()
        sleep = RecordingSleep()

        handler = OAuthCallbackHandler(auth, navigator, sleep=sleep)
        ok = await handler.handle(code="code-1")

        assert ok is True
        assert handler.message == "Successfully signed in"
        assert sleep.delays == [1.0]
        assert navigator.routes == [MAIN_ROUTE]

    @pytest.mark.asyncio
    async def test_provider_error_navigates_to_sign_in(self, auth):
        navigator = RecordingNavigator()
        sleep = RecordingSleep()

        handler = OAuthCallbackHandler(auth, navigator, sleep=sleep)
        ok = await handler.handle(error="access_denied")

        assert ok is False
        assert handler.message == "Authentication failed. Please try again."
        assert sleep.delays == [2.0]
        assert navigator.routes == [SIGN_IN_ROUTE]

    @pytest.mark.asyncio
    async def test_bad_code_navigates_to_sign_in(self, auth):
        auth.sign_in_with_provider("google")
        navigator = RecordingNavigator()

        handler = OAuthCallbackHandler(auth, navigator, sleep=RecordingSleep())
        ok = await handler.handle(code="unknown")

        assert ok is False
        assert navigator.routes == [SIGN_IN_ROUTE]

    @pytest.mark.asyncio
    async def test_without_code_uses_restored_session(self, auth, signed_in):
        navigator = RecordingNavigator()

        handler = OAuthCallbackHandler(auth, navigator, sleep=RecordingSleep())

        assert await handler.handle() is True
        assert navigator.routes == [MAIN_ROUTE]
