"""Configuration models for NowDo CLI.

The persisted ``config.json`` is validated into :class:`AppConfig`. Values
supplied through ``NOWDO_*`` environment variables take precedence over the
file (see :meth:`AppConfig.with_env_overrides`).
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class Platform(str, Enum):
    """Runtime platform the client pretends to be."""

    WEB = "web"
    IOS = "ios"
    ANDROID = "android"

    @property
    def is_web(self) -> bool:
        return self is Platform.WEB


class BackendConfig(BaseModel):
    """Hosted backend connection settings."""

    url: str = Field(default="")
    anon_key: str = Field(default="")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class APIConfig(BaseModel):
    """HTTP transport configuration."""

    timeout: int = Field(default=30)


class AppPlatformConfig(BaseModel):
    """Platform and redirect configuration."""

    platform: Platform = Field(default=Platform.WEB)
    web_origin: str = Field(default="http://localhost:8081")
    url_scheme: str = Field(default="nowdo")


class AuthConfig(BaseModel):
    """Authentication configuration."""

    oauth_providers: list[str] = Field(default_factory=lambda: ["google"])


class PaymentsConfig(BaseModel):
    """Per-platform keys for the purchase SDK."""

    ios_api_key: str = Field(default="")
    android_api_key: str = Field(default="")

    def key_for(self, platform: Platform) -> str:
        if platform is Platform.IOS:
            return self.ios_api_key
        if platform is Platform.ANDROID:
            return self.android_api_key
        return ""


class SyncConfig(BaseModel):
    """User-data load configuration."""

    pomodoro_history_limit: int = Field(default=100, gt=0)


class OutputConfig(BaseModel):
    """Output configuration."""

    color: bool = Field(default=True)
    compact: bool = Field(default=False)


class AppConfig(BaseModel):
    """Main NowDo configuration."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    app: AppPlatformConfig = Field(default_factory=AppPlatformConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    payments: PaymentsConfig = Field(default_factory=PaymentsConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    system_color_scheme: Literal["light", "dark"] | None = None

    def with_env_overrides(self) -> AppConfig:
        """Return a copy with ``NOWDO_*`` environment variables applied.

        Missing variables leave the file value untouched; nothing here raises
        on an absent or empty variable.
        """
        data = self.model_dump()
        overrides = {
            ("backend", "url"): "NOWDO_BACKEND_URL",
            ("backend", "anon_key"): "NOWDO_BACKEND_ANON_KEY",
            ("payments", "ios_api_key"): "NOWDO_PAYMENTS_IOS_KEY",
            ("payments", "android_api_key"): "NOWDO_PAYMENTS_ANDROID_KEY",
            ("app", "platform"): "NOWDO_PLATFORM",
            ("app", "web_origin"): "NOWDO_WEB_ORIGIN",
        }
        for (section, key), env_name in overrides.items():
            value = os.getenv(env_name)
            if value:
                data[section][key] = value
        return AppConfig.model_validate(data)
