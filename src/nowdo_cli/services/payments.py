"""Purchase SDK configuration at app start."""

from __future__ import annotations

import inspect
from typing import Any, Protocol

from nowdo_cli.models.config_models import PaymentsConfig, Platform
from nowdo_cli.utils.logger import get_logger

logger = get_logger("payments")


class PaymentsSDK(Protocol):
    """The subset of the purchase SDK the app uses."""

    def configure(self, api_key: str) -> Any: ...


async def configure_payments(
    sdk: PaymentsSDK | None, platform: Platform, config: PaymentsConfig
) -> bool:
    """Configure the purchase SDK for ``platform``. Returns True when configured.

    Web has no purchase SDK and is skipped. A platform without an API key is
    skipped with a warning. SDK errors are logged and never raised.
    """
    if platform.is_web:
        logger.info("payments: web platform, skipping configuration")
        return False

    api_key = config.key_for(platform)
    if not api_key:
        logger.warning("payments: no API key for %s, skipping", platform.value)
        return False

    if sdk is None:
        logger.info("payments: no SDK available on %s, skipping", platform.value)
        return False

    try:
        result = sdk.configure(api_key=api_key)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error("payments configuration failed: %s", e)
        return False

    logger.info("payments configured for %s", platform.value)
    return True
