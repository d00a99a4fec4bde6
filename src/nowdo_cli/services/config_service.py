"""Configuration service for managing NowDo CLI configuration.

This module provides the ConfigService class, which is the single source of truth
for configuration and persisted client state. It handles:

- Loading and saving config.json
- Applying NOWDO_* environment overrides on top of the file
- Persisting the auth session restored on cold start
- Persisting the PKCE code verifier between OAuth start and callback
"""

from __future__ import annotations

import json
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel

from nowdo_cli.models.config_models import AppConfig


class ConfigService:
    """Service for managing application configuration and client state files."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("nowdo_cli"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("nowdo_cli"))
        self.session_path = self.data_dir / "session.json"
        self.pkce_path = self.data_dir / "pkce.json"

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._file_config: AppConfig | None = None
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get the effective configuration (file values plus env overrides)."""
        if self._config is None:
            self._config = self.load_config().with_env_overrides()
        return self._config

    def load_config(self) -> AppConfig:
        """Load the file-backed configuration."""
        if self._file_config is not None:
            return self._file_config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._file_config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._file_config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._file_config

    def save_config(self) -> None:
        """Save the file-backed configuration."""
        if self._file_config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._file_config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

        self._config = None

    def get(self, key: str) -> Any:
        """Get an effective configuration value by dot-separated key."""
        return self._lookup(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a file configuration value by dot-separated key."""
        keys = key.split(".")
        config_dict = self.load_config().model_dump(mode="json")

        current = config_dict
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                raise KeyError(f"Unknown config key: {key}")
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(f"Unknown config key: {key}")

        current[keys[-1]] = value

        self._file_config = AppConfig.model_validate(config_dict)
        self.save_config()

    def reset(self, key: str | None = None) -> None:
        """Reset the whole configuration, or a single key, to defaults."""
        if key is None:
            self._file_config = AppConfig()
            self.save_config()
            return

        default_value = self._lookup(AppConfig(), key)
        if isinstance(default_value, BaseModel):
            default_value = default_value.model_dump(mode="json")
        self.set(key, default_value)

    @staticmethod
    def _lookup(config: AppConfig, key: str) -> Any:
        value: Any = config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    # ------------------------------------------------------------------
    # Persisted auth session
    # ------------------------------------------------------------------

    def save_session(self, session: dict[str, Any]) -> None:
        """Persist the auth session with owner-only permissions."""
        self._write_private(self.session_path, session)

    def load_session(self) -> dict[str, Any] | None:
        """Load the persisted auth session, or None if absent or corrupted."""
        return self._read_json(self.session_path)

    def clear_session(self) -> None:
        """Remove the persisted auth session."""
        if self.session_path.exists():
            self.session_path.unlink()

    def load_access_token(self) -> str | None:
        """Return the persisted access token, if any."""
        session = self.load_session()
        if session and "access_token" in session:
            return session["access_token"]
        return None

    # ------------------------------------------------------------------
    # PKCE verifier
    # ------------------------------------------------------------------

    def save_pkce_verifier(self, verifier: str, redirect_to: str) -> None:
        """Persist the PKCE code verifier for the pending OAuth flow."""
        self._write_private(
            self.pkce_path, {"code_verifier": verifier, "redirect_to": redirect_to}
        )

    def pop_pkce_verifier(self) -> str | None:
        """Return and forget the pending PKCE code verifier."""
        data = self._read_json(self.pkce_path)
        if self.pkce_path.exists():
            self.pkce_path.unlink()
        if data:
            return data.get("code_verifier")
        return None

    def save_system_color_scheme(self, scheme: str | None) -> None:
        """Remember the OS color scheme used when theme mode is ``system``."""
        self.set("system_color_scheme", scheme)

    @staticmethod
    def _write_private(path: Path, data: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        path.chmod(0o600)

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except JSONDecodeError:
            return None


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
