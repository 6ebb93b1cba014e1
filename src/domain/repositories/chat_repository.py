"""Chat repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.chat import Chat


class IChatRepository(Protocol):
    """Repository interface for chats and their memberships."""

    async def create_if_absent(self, chat: Chat) -> bool:
        """Insert the chat unless its id exists. Returns True if inserted."""
        ...

    async def add_member(self, chat_id: str, user_id: UUID) -> None:
        """Upsert the (chat_id, user_id) membership; a repeat is a no-op."""
        ...
