"""Telegram webhook envelope schemas.

Only the fields the gateway reads are declared; everything else Telegram
sends is kept as extra data and ignored.
"""

import json

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from core.exceptions import MalformedPayloadError
from domain.entities.inbound import ExternalUser, InboundIntent, WebhookStatus


class _Permissive(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TelegramUser(_Permissive):
    """Sender of a message or callback."""

    id: StrictInt
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    def to_external_user(self) -> ExternalUser:
        return ExternalUser(
            id=self.id,
            username=self.username,
            first_name=self.first_name,
            last_name=self.last_name,
        )


class TelegramChat(_Permissive):
    """Conversation the update belongs to."""

    id: StrictInt | StrictStr


class TelegramMessage(_Permissive):
    """Plain text message."""

    text: StrictStr
    chat: TelegramChat
    from_: TelegramUser = Field(alias="from")


class CallbackMessage(_Permissive):
    """Message an inline keyboard was attached to."""

    chat: TelegramChat


class TelegramCallbackQuery(_Permissive):
    """Inline keyboard button press."""

    id: StrictStr
    data: StrictStr
    from_: TelegramUser = Field(alias="from")
    message: CallbackMessage


class TelegramUpdate(_Permissive):
    """Webhook update carrying a message or a callback query."""

    update_id: int | None = None
    message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None

    @model_validator(mode="after")
    def _require_variant(self) -> "TelegramUpdate":
        if self.message is None and self.callback_query is None:
            raise ValueError("update carries neither a message nor a callback_query")
        return self

    def to_intent(self) -> InboundIntent:
        """Normalise either variant; a message wins if both are present."""
        if self.message is not None:
            return InboundIntent(
                prompt=self.message.text,
                sender=self.message.from_.to_external_user(),
                chat_id=str(self.message.chat.id),
            )

        callback = self.callback_query
        assert callback is not None
        return InboundIntent(
            prompt=callback.data,
            sender=callback.from_.to_external_user(),
            chat_id=str(callback.message.chat.id),
            callback_query_id=callback.id,
        )


class WebhookResponse(BaseModel):
    """Body of every 200 answer to the platform."""

    status: WebhookStatus


def parse_update(body: bytes) -> TelegramUpdate:
    """Decode and validate a raw webhook body.

    Raises:
        MalformedPayloadError: If the body is not JSON or fits neither variant
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayloadError() from e

    try:
        return TelegramUpdate.model_validate(payload)
    except ValidationError as e:
        raise MalformedPayloadError() from e
