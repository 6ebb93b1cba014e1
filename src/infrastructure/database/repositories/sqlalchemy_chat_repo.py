"""SQLAlchemy implementation of Chat repository."""

from typing import Any
from uuid import UUID

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.chat import Chat
from infrastructure.database.models import ChatModel, ChatUserModel


class SQLAlchemyChatRepository:
    """SQLAlchemy implementation of IChatRepository.

    Both writes are ``INSERT ... ON CONFLICT DO NOTHING`` so that retried
    webhook deliveries and concurrent requests for the same chat never fail
    on the unique keys.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_absent(self, chat: Chat) -> bool:
        """Insert the chat unless its id exists."""
        stmt = (
            self._insert(ChatModel)
            .values(
                id=chat.id,
                title=chat.title,
                created_by=chat.created_by,
                created_at=chat.created_at,
            )
            .on_conflict_do_nothing(index_elements=[ChatModel.id])
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def add_member(self, chat_id: str, user_id: UUID) -> None:
        """Upsert the membership pair."""
        stmt = (
            self._insert(ChatUserModel)
            .values(chat_id=chat_id, user_id=user_id)
            .on_conflict_do_nothing(
                index_elements=[ChatUserModel.chat_id, ChatUserModel.user_id]
            )
        )
        await self._session.execute(stmt)

    def _insert(self, model: type[Any]) -> Any:
        """Dialect-specific INSERT supporting ON CONFLICT."""
        if self._session.get_bind().dialect.name == "sqlite":
            return sqlite.insert(model)
        return postgresql.insert(model)
