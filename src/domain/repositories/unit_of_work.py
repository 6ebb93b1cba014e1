"""Unit of Work protocols.

Two flavours keep the row-level isolation boundary visible in the types:
the privileged unit of work reaches profiles only, the scoped one reaches
chats only and carries the caller's per-request credential.
"""

from typing import Protocol

from domain.repositories.chat_repository import IChatRepository
from domain.repositories.profile_repository import IProfileRepository


class IPrivilegedUnitOfWork(Protocol):
    """Service-role transaction, bypasses row-level security."""

    profiles: IProfileRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IPrivilegedUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...


class IScopedUnitOfWork(Protocol):
    """Transaction evaluated under the row-level policies of one identity."""

    chats: IChatRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IScopedUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
