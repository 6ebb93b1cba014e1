"""Fire-and-forget hand-off to the processing service."""

from typing import Any

import structlog

from domain.entities.inbound import INCOMING_ROLE, RequestContext
from infrastructure.auth.provider import AnonymousSession
from infrastructure.downstream.client import DownstreamClient, DownstreamError

logger = structlog.get_logger()


class DispatchService:
    """Builds processing requests and sends them after the webhook has answered."""

    def __init__(self, downstream: DownstreamClient) -> None:
        self._downstream = downstream

    def build_request(self, context: RequestContext) -> dict[str, Any]:
        """Normalised request for the processing function."""
        return {
            "prompt": context.intent.prompt,
            "chatId": context.intent.chat_id,
            "profileId": str(context.profile_id),
            "metadata": context.metadata(),
            "timezone": None,
            "role": INCOMING_ROLE,
            "callbackUrl": self._downstream.callback_url,
        }

    async def dispatch(self, request: dict[str, Any], identity: AnonymousSession) -> None:
        """Invoke the processing function; failures are only logged.

        The platform already has its acknowledgment when this runs, so there
        is nobody to report an error to and nothing is retried.
        """
        try:
            await self._downstream.invoke_processing(request, identity.access_token)
        except DownstreamError as e:
            logger.error(
                "downstream_dispatch_failed",
                profile_id=request.get("profileId"),
                status_code=e.status_code,
                error=str(e),
            )
            return
        except Exception:
            logger.exception(
                "downstream_dispatch_failed",
                profile_id=request.get("profileId"),
            )
            return

        logger.info("downstream_dispatched", profile_id=request.get("profileId"))
