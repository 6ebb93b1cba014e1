"""Telegram Bot API client.

Only the two calls the gateway needs: sending a text message and answering a
callback query. Failures are logged and swallowed; a failed notice to the user
must never turn into a failed webhook delivery.
"""

from typing import Any, Optional

import httpx
import structlog

from core.config import settings

logger = structlog.get_logger()


class TelegramClient:
    """Thin async wrapper around the Bot API."""

    def __init__(
        self,
        bot_token: str = settings.telegram_bot_token,
        base_url: str = settings.telegram_api_base_url,
        timeout: float = settings.http_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._bot_token = bot_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def send_message(self, chat_id: str | int, text: str) -> bool:
        """Send an HTML-formatted message. Returns True if Telegram accepted it."""
        return await self._call(
            "sendMessage",
            {"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
            failure_event="telegram_send_failed",
        )

    async def answer_callback_query(
        self, callback_query_id: str, text: Optional[str] = None
    ) -> bool:
        """Acknowledge an inline-keyboard callback so the client stops spinning."""
        payload: dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return await self._call(
            "answerCallbackQuery",
            payload,
            failure_event="telegram_callback_answer_failed",
        )

    async def _call(self, method: str, payload: dict[str, Any], failure_event: str) -> bool:
        url = f"{self._base_url}/bot{self._bot_token}/{method}"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            logger.error(failure_event, method=method, error=str(e), error_type=type(e).__name__)
            return False

        if response.is_error:
            logger.error(
                failure_event,
                method=method,
                status_code=response.status_code,
                description=_description(response),
            )
            return False
        return True


def _description(response: httpx.Response) -> str | None:
    """Telegram puts the reason for a failed call in ``description``."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("description") if isinstance(body, dict) else None
