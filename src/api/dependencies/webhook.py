"""Webhook authentication dependencies."""

import hmac
from typing import Annotated

import structlog
from fastapi import Depends

from core.config import Settings, get_settings
from core.exceptions import WebhookForbiddenError, WebhookNotConfiguredError

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

logger = structlog.get_logger()


def get_webhook_secret(
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """
    Dependency returning the configured webhook secret.

    Raises:
        WebhookNotConfiguredError: If no secret is configured; the gateway
            refuses all traffic rather than accept unauthenticated updates
    """
    if not settings.telegram_webhook_secret:
        logger.error("webhook_secret_not_configured")
        raise WebhookNotConfiguredError()
    return settings.telegram_webhook_secret


def verify_secret_token(provided: str | None, expected: str) -> None:
    """
    Compare the secret header against the configured secret.

    Raises:
        WebhookForbiddenError: If the header is missing or does not match
    """
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("webhook_forbidden", has_secret=bool(provided))
        raise WebhookForbiddenError()


WebhookSecret = Annotated[str, Depends(get_webhook_secret)]
