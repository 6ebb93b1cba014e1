"""Chat domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass
class Chat:
    """Domain entity for a Telegram conversation thread."""

    id: str
    created_by: UUID
    title: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)

