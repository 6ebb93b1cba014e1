"""Clients for the Supabase edge functions behind the gateway."""

from typing import Any, Optional

import httpx
import structlog

from core.config import settings

logger = structlog.get_logger()


class DownstreamError(Exception):
    """The downstream function rejected or never received a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DownstreamClient:
    """Posts JSON payloads to the processing function and the delivery callback."""

    def __init__(
        self,
        processing_url: str = settings.processing_url,
        callback_url: str = settings.callback_url,
        anon_key: str = settings.supabase_anon_key,
        service_role_key: str = settings.supabase_service_role_key,
        timeout: float = settings.http_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._processing_url = processing_url
        self._callback_url = callback_url
        self._anon_key = anon_key
        self._service_role_key = service_role_key
        self._timeout = timeout
        self._transport = transport

    @property
    def callback_url(self) -> str:
        """Where finished replies are delivered."""
        return self._callback_url

    async def invoke_processing(self, payload: dict[str, Any], access_token: str) -> None:
        """Invoke the processing function as the request's anonymous identity.

        Raises:
            DownstreamError: On transport failure or a non-2xx answer
        """
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token}",
        }
        await self._post(self._processing_url, payload, headers)

    async def deliver_reply(self, payload: dict[str, Any]) -> None:
        """Hand a finished reply to the outgoing function.

        Raises:
            DownstreamError: On transport failure or a non-2xx answer
        """
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
        }
        await self._post(self._callback_url, payload, headers)

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> None:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers=headers,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as e:
            raise DownstreamError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise DownstreamError(
                f"{url} answered {response.status_code}",
                status_code=response.status_code,
            )
