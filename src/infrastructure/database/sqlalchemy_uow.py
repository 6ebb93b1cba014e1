"""SQLAlchemy Unit of Work implementations."""

import json
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.auth.provider import AnonymousSession
from infrastructure.database.repositories.sqlalchemy_chat_repo import SQLAlchemyChatRepository
from infrastructure.database.repositories.sqlalchemy_profile_repo import SQLAlchemyProfileRepository


class _SQLAlchemyUnitOfWork:
    """Session lifecycle shared by both unit of work flavours."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    def _require_session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._session

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def _open(self) -> None:
        self._session = self._session_factory()

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager and cleanup."""
        if self._session:
            if exc_type:
                await self.rollback()
            await self._session.close()
            self._session = None


class SQLAlchemyPrivilegedUnitOfWork(_SQLAlchemyUnitOfWork):
    """Unit of Work on the service-role connection (bypasses RLS)."""

    @property
    def profiles(self) -> SQLAlchemyProfileRepository:
        """Get profile repository."""
        return SQLAlchemyProfileRepository(self._require_session())

    async def __aenter__(self) -> "SQLAlchemyPrivilegedUnitOfWork":
        """Enter the context manager and create session."""
        await self._open()
        return self


class SQLAlchemyScopedUnitOfWork(_SQLAlchemyUnitOfWork):
    """Unit of Work whose statements run as the request's anonymous identity.

    On PostgreSQL the transaction switches to the ``authenticated`` role and
    publishes the JWT claims the way PostgREST does, so ``auth.uid()`` and the
    Supabase RLS policies evaluate against the minted identity. Both settings
    are transaction-local and vanish on commit or rollback.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        identity: AnonymousSession,
    ) -> None:
        super().__init__(session_factory)
        self._identity = identity

    @property
    def chats(self) -> SQLAlchemyChatRepository:
        """Get chat repository."""
        return SQLAlchemyChatRepository(self._require_session())

    async def __aenter__(self) -> "SQLAlchemyScopedUnitOfWork":
        """Enter the context manager, create session and bind the identity."""
        await self._open()
        session = self._require_session()
        if session.get_bind().dialect.name == "postgresql":
            await session.execute(text("SET LOCAL ROLE authenticated"))
            await session.execute(
                text("SELECT set_config('request.jwt.claims', :claims, true)"),
                {"claims": json.dumps(self._claims())},
            )
        return self

    def _claims(self) -> dict[str, Any]:
        claims = dict(self._identity.claims)
        claims.setdefault("sub", str(self._identity.user_id))
        claims.setdefault("role", "authenticated")
        return claims
