"""Normalised inbound events and the requests derived from them."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from uuid import UUID

PLATFORM = "telegram"
INCOMING_ROLE = "user"


class WebhookStatus(StrEnum):
    """Statuses returned to the platform with HTTP 200."""

    RECEIVED = "received"
    RECEIVED_NOT_PROCESSED = "received_not_processed"
    UNAUTHORIZED_USER = "unauthorized_user"
    TIMEZONE_SETUP_HANDLED = "timezone_setup_handled"
    TIMEZONE_SETUP_ERROR = "timezone_setup_error"


@dataclass(frozen=True, slots=True)
class ExternalUser:
    """A user as Telegram reports it; arrives fresh with every update."""

    id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True, slots=True)
class InboundIntent:
    """What a webhook update asks for, independent of its envelope variant."""

    prompt: str
    sender: ExternalUser
    chat_id: str
    callback_query_id: str | None = None

    @property
    def is_processable(self) -> bool:
        """Updates without text carry nothing to hand on."""
        return bool(self.prompt) and bool(self.chat_id)


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Identity and chat resolved for one request."""

    intent: InboundIntent
    profile_id: UUID
    timezone: str | None

    def metadata(self) -> dict[str, Any]:
        """Sender metadata shared by the dispatch and delivery payloads."""
        return {
            "platform": PLATFORM,
            "externalUserId": self.intent.sender.id,
            "handle": self.intent.sender.username,
            "chatId": self.intent.chat_id,
        }
