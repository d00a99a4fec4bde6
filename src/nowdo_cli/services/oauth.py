"""OAuth helpers: PKCE pairs and platform-dependent redirect URLs."""

from __future__ import annotations

import base64
import hashlib
import secrets

from nowdo_cli.models.config_models import AppPlatformConfig

OAUTH_CALLBACK_ROUTE = "(auth)/oauth-callback"
RESET_PASSWORD_ROUTE = "reset-password"

# Extra authorize parameters per provider.
PROVIDER_QUERY_PARAMS: dict[str, dict[str, str]] = {
    "google": {"access_type": "offline", "prompt": "consent"},
}


def generate_code_verifier(length: int = 64) -> str:
    """Random PKCE code verifier (43-128 URL-safe characters)."""
    if not 43 <= length <= 128:
        raise ValueError("PKCE code verifier length must be between 43 and 128")
    return secrets.token_urlsafe(96)[:length]


def code_challenge(verifier: str) -> str:
    """S256 challenge of ``verifier``: base64url(sha256) without padding."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _route_url(app: AppPlatformConfig, route: str) -> str:
    if app.platform.is_web:
        return f"{app.web_origin.rstrip('/')}/{route}"
    return f"{app.url_scheme}://{route}"


def oauth_redirect_url(app: AppPlatformConfig) -> str:
    """Where the provider sends the browser back after sign-in."""
    return _route_url(app, OAUTH_CALLBACK_ROUTE)


def reset_password_redirect_url(app: AppPlatformConfig) -> str:
    return _route_url(app, RESET_PASSWORD_ROUTE)
