"""Engine and session factory for the service-role database connection."""

from typing import Any, AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings, settings


def build_engine(config: Settings) -> AsyncEngine:
    """Create the async engine for ``config.async_database_url``.

    Supavisor in transaction mode (port 6543 or any ``pooler.supabase.com``
    host) cannot keep asyncpg's prepared statements between transactions,
    so the statement cache is turned off there.
    """
    url = make_url(config.async_database_url)
    connect_args: dict[str, Any] = {}
    engine_args: dict[str, Any] = {"echo": config.debug}

    if url.get_backend_name() == "postgresql":
        host = url.host or ""
        if host.endswith("pooler.supabase.com") or url.port == 6543:
            connect_args["statement_cache_size"] = 0
        engine_args["pool_pre_ping"] = True

    return create_async_engine(url, connect_args=connect_args, **engine_args)


engine = build_engine(settings)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding one session per request."""
    async with async_session_factory() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
