"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

# Settings are read at import time; keep tests off real services.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "test-bot-token")
os.environ.setdefault("TELEGRAM_WEBHOOK_SECRET", "test-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import Settings
from domain.services.chat_service import ChatService
from domain.services.dispatch_service import DispatchService
from domain.services.ingest_service import IngestService
from domain.services.onboarding_service import OnboardingService
from domain.services.profile_service import ProfileService
from infrastructure.auth.provider import AnonymousSession
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import (
    SQLAlchemyPrivilegedUnitOfWork,
    SQLAlchemyScopedUnitOfWork,
)
from tests.fakes import (
    FakeDownstreamClient,
    FakeIdentityProvider,
    FakeTelegramClient,
    ScriptedLLM,
)

# Test database URL (SQLite in memory, one shared connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

WEBHOOK_SECRET = "test-secret"


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values: dict[str, Any] = {
        "supabase_url": "https://project.supabase.co",
        "supabase_anon_key": "test-anon-key",
        "supabase_service_role_key": "test-service-role-key",
        "telegram_bot_token": "test-bot-token",
        "telegram_webhook_secret": WEBHOOK_SECRET,
        "openai_api_key": "test-openai-key",
        "allowed_usernames": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def events() -> list[str]:
    """Shared call log for ordering assertions across fakes."""
    return []


@pytest.fixture
def identity_provider(events: list[str]) -> FakeIdentityProvider:
    return FakeIdentityProvider(events)


@pytest.fixture
def telegram(events: list[str]) -> FakeTelegramClient:
    return FakeTelegramClient(events)


@pytest.fixture
def downstream() -> FakeDownstreamClient:
    return FakeDownstreamClient()


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def profile_service(session_factory: async_sessionmaker[AsyncSession]) -> ProfileService:
    return ProfileService(lambda: SQLAlchemyPrivilegedUnitOfWork(session_factory))


@pytest.fixture
def chat_service(session_factory: async_sessionmaker[AsyncSession]) -> ChatService:
    def factory(identity: AnonymousSession) -> SQLAlchemyScopedUnitOfWork:
        return SQLAlchemyScopedUnitOfWork(session_factory, identity)

    return ChatService(factory)


@pytest.fixture
def dispatch_service(downstream: FakeDownstreamClient) -> DispatchService:
    return DispatchService(downstream)


@pytest.fixture
def ingest_service(
    identity_provider: FakeIdentityProvider,
    profile_service: ProfileService,
    chat_service: ChatService,
    dispatch_service: DispatchService,
    telegram: FakeTelegramClient,
    downstream: FakeDownstreamClient,
    llm: ScriptedLLM,
) -> IngestService:
    """Ingest service wired to the SQLite store and fake collaborators."""
    onboarding = OnboardingService(
        llm=llm,
        profile_service=profile_service,
        telegram=telegram,
        downstream=downstream,
        max_steps=3,
    )
    return IngestService(
        identity_provider=identity_provider,
        profile_service=profile_service,
        chat_service=chat_service,
        onboarding_service=onboarding,
        dispatch_service=dispatch_service,
    )


@pytest.fixture
def build_client(
    ingest_service: IngestService,
    dispatch_service: DispatchService,
    telegram: FakeTelegramClient,
) -> Callable[..., AsyncClient]:
    """
    Build a test client for an app wired to fakes.

    Keyword arguments override settings, e.g.
    ``build_client(telegram_webhook_secret="")``.
    """
    from api.v1.dependencies import (
        get_dispatch_service,
        get_ingest_service,
        get_telegram_client,
    )
    from core.config import get_settings
    from main import create_app

    def build(**overrides: Any) -> AsyncClient:
        app = create_app()
        app_settings = make_settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: app_settings
        app.dependency_overrides[get_ingest_service] = lambda: ingest_service
        app.dependency_overrides[get_dispatch_service] = lambda: dispatch_service
        app.dependency_overrides[get_telegram_client] = lambda: telegram
        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://test")

    return build


@pytest.fixture
async def client(build_client: Callable[..., AsyncClient]) -> AsyncGenerator[AsyncClient, None]:
    """Client with the default test settings."""
    async with build_client() as c:
        yield c


@pytest.fixture
def secret_headers() -> dict[str, str]:
    return {"X-Telegram-Bot-Api-Secret-Token": WEBHOOK_SECRET}
