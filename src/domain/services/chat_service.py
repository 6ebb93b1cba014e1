"""Chat and membership provisioning (row-scoped store access)."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import ChatProvisioningError
from domain.entities.chat import Chat
from domain.repositories.unit_of_work import IScopedUnitOfWork
from infrastructure.auth.provider import AnonymousSession

logger = structlog.get_logger()


class ChatService:
    """Ensures the chat row and the caller's membership exist.

    Writes go through the unit of work bound to the request's anonymous
    identity, so row-level policies decide what the caller may touch.
    """

    def __init__(
        self, uow_factory: Callable[[AnonymousSession], IScopedUnitOfWork]
    ) -> None:
        self._uow_factory = uow_factory

    async def ensure_membership(
        self, identity: AnonymousSession, chat_id: str, profile_id: UUID
    ) -> None:
        """Create the chat if needed, then upsert the membership.

        Repeating the call for the same pair is a no-op.

        Raises:
            ChatProvisioningError: On any store failure
        """
        try:
            async with self._uow_factory(identity) as uow:
                created = await uow.chats.create_if_absent(
                    Chat(id=chat_id, created_by=profile_id)
                )
                await uow.chats.add_member(chat_id, profile_id)
                await uow.commit()
        except Exception as e:
            logger.error(
                "chat_provisioning_failed",
                chat_id=chat_id,
                profile_id=str(profile_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ChatProvisioningError() from e

        if created:
            logger.info("chat_created", chat_id=chat_id, profile_id=str(profile_id))
