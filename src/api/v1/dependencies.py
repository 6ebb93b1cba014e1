"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import get_settings
from domain.services.chat_service import ChatService
from domain.services.dispatch_service import DispatchService
from domain.services.ingest_service import IngestService
from domain.services.onboarding_service import OnboardingService
from domain.services.profile_service import ProfileService
from infrastructure.auth.anonymous_provider import SupabaseAnonymousAuthProvider
from infrastructure.auth.provider import AnonymousSession
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import (
    SQLAlchemyPrivilegedUnitOfWork,
    SQLAlchemyScopedUnitOfWork,
)
from infrastructure.downstream.client import DownstreamClient
from infrastructure.llm.openai_llm import OpenAILLM
from infrastructure.telegram.client import TelegramClient


def get_privileged_uow_factory() -> Callable[[], SQLAlchemyPrivilegedUnitOfWork]:
    """Factory for service-role Unit of Work instances."""

    def factory() -> SQLAlchemyPrivilegedUnitOfWork:
        return SQLAlchemyPrivilegedUnitOfWork(async_session_factory)

    return factory


def get_scoped_uow_factory() -> Callable[[AnonymousSession], SQLAlchemyScopedUnitOfWork]:
    """Factory for Unit of Work instances bound to a request identity."""

    def factory(identity: AnonymousSession) -> SQLAlchemyScopedUnitOfWork:
        return SQLAlchemyScopedUnitOfWork(async_session_factory, identity)

    return factory


@lru_cache
def get_telegram_client() -> TelegramClient:
    """Get Telegram client instance."""
    return TelegramClient()


@lru_cache
def get_downstream_client() -> DownstreamClient:
    """Get downstream client instance."""
    return DownstreamClient()


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_privileged_uow_factory())


@lru_cache
def get_dispatch_service() -> DispatchService:
    """Get Dispatch service instance."""
    return DispatchService(get_downstream_client())


@lru_cache
def get_onboarding_service() -> OnboardingService:
    """Get Onboarding service instance."""
    return OnboardingService(
        llm=OpenAILLM(),
        profile_service=get_profile_service(),
        telegram=get_telegram_client(),
        downstream=get_downstream_client(),
        max_steps=get_settings().onboarding_max_steps,
    )


@lru_cache
def get_ingest_service() -> IngestService:
    """Get Ingest service instance."""
    return IngestService(
        identity_provider=SupabaseAnonymousAuthProvider(),
        profile_service=get_profile_service(),
        chat_service=ChatService(get_scoped_uow_factory()),
        onboarding_service=get_onboarding_service(),
        dispatch_service=get_dispatch_service(),
    )
