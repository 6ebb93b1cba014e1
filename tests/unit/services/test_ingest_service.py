"""Unit tests for IngestService."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from core.exceptions import (
    ChatProvisioningError,
    IdentityProvisioningError,
    ProfileProvisioningError,
)
from domain.entities.inbound import ExternalUser, InboundIntent, RequestContext, WebhookStatus
from domain.entities.profile import Profile
from domain.services.dispatch_service import DispatchService
from domain.services.ingest_service import IngestService
from tests.fakes import FakeDownstreamClient, FakeIdentityProvider


@pytest.fixture
def intent() -> InboundIntent:
    return InboundIntent(
        prompt="What's on my calendar?",
        sender=ExternalUser(id=42, username="alice"),
        chat_id="100",
    )


@pytest.fixture
def profile_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def chat_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def onboarding_service() -> AsyncMock:
    service = AsyncMock()
    service.run.return_value = WebhookStatus.TIMEZONE_SETUP_HANDLED
    return service


@pytest.fixture
def service(
    identity_provider: FakeIdentityProvider,
    profile_service: AsyncMock,
    chat_service: AsyncMock,
    onboarding_service: AsyncMock,
) -> IngestService:
    return IngestService(
        identity_provider=identity_provider,
        profile_service=profile_service,
        chat_service=chat_service,
        onboarding_service=onboarding_service,
        dispatch_service=DispatchService(FakeDownstreamClient()),
    )


def ready_profile(**kwargs) -> Profile:
    return Profile(service_id=42, auth_user_id=uuid4(), timezone="UTC-5", **kwargs)


class TestHandle:
    @pytest.mark.asyncio
    async def test_ready_profile_is_dispatched(
        self,
        service: IngestService,
        identity_provider: FakeIdentityProvider,
        profile_service: AsyncMock,
        chat_service: AsyncMock,
        onboarding_service: AsyncMock,
        intent: InboundIntent,
    ):
        profile = ready_profile()
        profile_service.resolve.return_value = profile

        outcome = await service.handle(intent)

        assert outcome.status is WebhookStatus.RECEIVED
        assert outcome.identity is not None
        assert outcome.identity.user_id == identity_provider.minted[0]
        assert outcome.dispatch_request is not None
        assert outcome.dispatch_request["profileId"] == str(profile.id)
        assert outcome.dispatch_request["prompt"] == "What's on my calendar?"
        onboarding_service.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_profile_resolved_with_minted_identity(
        self,
        service: IngestService,
        identity_provider: FakeIdentityProvider,
        profile_service: AsyncMock,
        chat_service: AsyncMock,
        intent: InboundIntent,
    ):
        profile = ready_profile()
        profile_service.resolve.return_value = profile

        outcome = await service.handle(intent)

        profile_service.resolve.assert_called_once_with(
            intent.sender, identity_provider.minted[0]
        )
        chat_service.ensure_membership.assert_called_once_with(
            outcome.identity, "100", profile.id
        )

    @pytest.mark.asyncio
    async def test_profile_without_timezone_goes_to_onboarding(
        self,
        service: IngestService,
        profile_service: AsyncMock,
        onboarding_service: AsyncMock,
        intent: InboundIntent,
    ):
        profile = Profile(service_id=42, auth_user_id=uuid4())
        profile_service.resolve.return_value = profile

        outcome = await service.handle(intent)

        assert outcome.status is WebhookStatus.TIMEZONE_SETUP_HANDLED
        assert outcome.dispatch_request is None
        context: RequestContext = onboarding_service.run.call_args.args[0]
        assert context.profile_id == profile.id
        assert context.timezone is None
        assert context.intent is intent

    @pytest.mark.asyncio
    async def test_onboarding_error_status_is_passed_through(
        self,
        service: IngestService,
        profile_service: AsyncMock,
        onboarding_service: AsyncMock,
        intent: InboundIntent,
    ):
        profile_service.resolve.return_value = Profile(service_id=42, auth_user_id=uuid4())
        onboarding_service.run.return_value = WebhookStatus.TIMEZONE_SETUP_ERROR

        outcome = await service.handle(intent)

        assert outcome.status is WebhookStatus.TIMEZONE_SETUP_ERROR
        assert outcome.dispatch_request is None

    @pytest.mark.asyncio
    async def test_identity_failure_stops_before_profile(
        self,
        profile_service: AsyncMock,
        chat_service: AsyncMock,
        onboarding_service: AsyncMock,
        intent: InboundIntent,
    ):
        service = IngestService(
            identity_provider=FakeIdentityProvider(error=IdentityProvisioningError()),
            profile_service=profile_service,
            chat_service=chat_service,
            onboarding_service=onboarding_service,
            dispatch_service=DispatchService(FakeDownstreamClient()),
        )

        with pytest.raises(IdentityProvisioningError):
            await service.handle(intent)

        profile_service.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_profile_failure_propagates(
        self,
        service: IngestService,
        profile_service: AsyncMock,
        chat_service: AsyncMock,
        intent: InboundIntent,
    ):
        profile_service.resolve.side_effect = ProfileProvisioningError()

        with pytest.raises(ProfileProvisioningError):
            await service.handle(intent)

        chat_service.ensure_membership.assert_not_called()

    @pytest.mark.asyncio
    async def test_chat_failure_propagates(
        self,
        service: IngestService,
        profile_service: AsyncMock,
        chat_service: AsyncMock,
        onboarding_service: AsyncMock,
        intent: InboundIntent,
    ):
        profile_service.resolve.return_value = ready_profile()
        chat_service.ensure_membership.side_effect = ChatProvisioningError()

        with pytest.raises(ChatProvisioningError):
            await service.handle(intent)

        onboarding_service.run.assert_not_called()
