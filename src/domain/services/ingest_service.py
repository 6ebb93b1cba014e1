"""Webhook ingestion: identity, profile, chat, then onboarding or dispatch."""

from dataclasses import dataclass
from typing import Any

import structlog

from domain.entities.inbound import InboundIntent, RequestContext, WebhookStatus
from domain.entities.profile import OnboardingState, onboarding_state
from domain.services.chat_service import ChatService
from domain.services.dispatch_service import DispatchService
from domain.services.onboarding_service import OnboardingService
from domain.services.profile_service import ProfileService
from infrastructure.auth.provider import AnonymousSession, IIdentityProvider

logger = structlog.get_logger()


@dataclass(frozen=True)
class IngestOutcome:
    """Status for the platform, plus the dispatch to run once it is sent."""

    status: WebhookStatus
    dispatch_request: dict[str, Any] | None = None
    identity: AnonymousSession | None = None


class IngestService:
    """Orchestrates one accepted webhook update.

    Every step is idempotent on the store side, so a platform retry after a
    provisioning failure simply runs the whole sequence again.
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        profile_service: ProfileService,
        chat_service: ChatService,
        onboarding_service: OnboardingService,
        dispatch_service: DispatchService,
    ) -> None:
        self._identity_provider = identity_provider
        self._profile_service = profile_service
        self._chat_service = chat_service
        self._onboarding_service = onboarding_service
        self._dispatch_service = dispatch_service

    async def handle(self, intent: InboundIntent) -> IngestOutcome:
        """
        Provision identity and chat, then pick the onboarding or dispatch path.

        Raises:
            ProvisioningError: If identity, profile or chat setup fails
        """
        identity = await self._identity_provider.sign_in_anonymously()
        profile = await self._profile_service.resolve(intent.sender, identity.user_id)
        await self._chat_service.ensure_membership(identity, intent.chat_id, profile.id)

        context = RequestContext(
            intent=intent,
            profile_id=profile.id,
            timezone=profile.timezone,
        )

        if onboarding_state(profile) is OnboardingState.AWAITING_TIMEZONE:
            status = await self._onboarding_service.run(context)
            return IngestOutcome(status=status)

        logger.info("webhook_accepted_for_dispatch", profile_id=str(profile.id))
        return IngestOutcome(
            status=WebhookStatus.RECEIVED,
            dispatch_request=self._dispatch_service.build_request(context),
            identity=identity,
        )
