"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from infrastructure.auth.provider import AnonymousSession


class FakePrivilegedUnitOfWork:
    """Fake service-role Unit of Work with a mocked profile repository."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakePrivilegedUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FakeScopedUnitOfWork:
    """Fake row-scoped Unit of Work; remembers the identity it was opened for."""

    def __init__(self) -> None:
        self.chats = AsyncMock()
        self.identities: list[AnonymousSession] = []
        self.committed = False

    def __call__(self, identity: AnonymousSession) -> "FakeScopedUnitOfWork":
        self.identities.append(identity)
        return self

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        pass

    async def __aenter__(self) -> "FakeScopedUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakePrivilegedUnitOfWork:
    """Create a fresh FakePrivilegedUnitOfWork."""
    return FakePrivilegedUnitOfWork()


@pytest.fixture
def scoped_uow() -> FakeScopedUnitOfWork:
    """Create a fresh FakeScopedUnitOfWork."""
    return FakeScopedUnitOfWork()


@pytest.fixture
def profile_id() -> UUID:
    """A random profile ID."""
    return uuid4()


@pytest.fixture
def identity() -> AnonymousSession:
    """A minted anonymous session."""
    user_id = uuid4()
    return AnonymousSession(
        user_id=user_id,
        access_token="scoped-token",
        claims={"sub": str(user_id), "role": "authenticated"},
    )
