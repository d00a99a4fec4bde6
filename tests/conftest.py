"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

import os
import tempfile

# Loggers and consoles touch platformdirs at import time; keep it out of $HOME.
_SANDBOX = tempfile.mkdtemp(prefix="nowdo-tests-")
for _var in ("XDG_STATE_HOME", "XDG_CONFIG_HOME", "XDG_DATA_HOME"):
    os.environ[_var] = os.path.join(_SANDBOX, _var.lower())

import pytest

from fakes import ANON_KEY, BACKEND_URL, FakeBackend
from nowdo_cli.models.core import AuthUser
from nowdo_cli.services.api.client import APIClient
from nowdo_cli.services.config_service import get_config_service
from nowdo_cli.utils.ui.console import get_console

_ENV_VARS = (
    "NOWDO_BACKEND_URL",
    "NOWDO_BACKEND_ANON_KEY",
    "NOWDO_PAYMENTS_IOS_KEY",
    "NOWDO_PAYMENTS_ANDROID_KEY",
    "NOWDO_PLATFORM",
    "NOWDO_WEB_ORIGIN",
)


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path, monkeypatch):
    """Provide the real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only, and
    clears the lru_caches so each test gets a fresh service and console.
    """
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "nowdo_cli.services.config_service.user_config_dir",
        lambda *args, **kwargs: str(tmp_path / "config"),
    )
    monkeypatch.setattr(
        "nowdo_cli.services.config_service.user_data_dir",
        lambda *args, **kwargs: str(tmp_path / "data"),
    )
    get_config_service.cache_clear()
    get_console.cache_clear()
    yield get_config_service()
    get_config_service.cache_clear()
    get_console.cache_clear()


@pytest.fixture()
def config_service(tmp_config):
    """ConfigService pointing at the fake backend."""
    tmp_config.set("backend.url", BACKEND_URL)
    tmp_config.set("backend.anon_key", ANON_KEY)
    tmp_config.set("output.color", False)
    get_console.cache_clear()
    return tmp_config


# ---------------------------------------------------------------------------
# Fake backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def client(config_service, backend) -> APIClient:
    return APIClient(config_service, transport=backend.transport)


@pytest.fixture()
def user(backend) -> AuthUser:
    """A registered user (not signed in)."""
    return AuthUser.model_validate(
        backend.add_user("ada@example.com", full_name="Ada Lovelace")
    )


@pytest.fixture()
def other_user(backend) -> AuthUser:
    return AuthUser.model_validate(backend.add_user("grace@example.com"))


@pytest.fixture()
def signed_in(config_service, backend, user) -> AuthUser:
    """Persist a valid session for ``user`` as a previous login would."""
    session = backend.issue_session(backend.users[user.id])
    config_service.save_session(session)
    return user


@pytest.fixture()
def cli_backend(config_service, backend, monkeypatch):
    """Route every client the CLI builds through the fake backend."""

    def fake_get_client(*args, **kwargs):
        return APIClient(config_service, transport=backend.transport)

    for module in ("auth", "sync", "utils"):
        monkeypatch.setattr(
            f"nowdo_cli.commands.{module}.get_client", fake_get_client
        )
    return backend
