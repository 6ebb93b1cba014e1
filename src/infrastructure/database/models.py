"""SQLAlchemy ORM models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """Profile of a Telegram user, linked to the latest anonymous auth identity."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    auth_user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    service_id: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255))
    timezone: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    created_chats: Mapped[list["ChatModel"]] = relationship(
        "ChatModel",
        back_populates="creator",
        foreign_keys="ChatModel.created_by",
    )
    chat_memberships: Mapped[list["ChatUserModel"]] = relationship(
        "ChatUserModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class ChatModel(Base):
    """Telegram chat, keyed by the string-normalised chat id."""

    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    creator: Mapped["ProfileModel | None"] = relationship(
        "ProfileModel",
        back_populates="created_chats",
        foreign_keys=[created_by],
    )
    members: Mapped[list["ChatUserModel"]] = relationship(
        "ChatUserModel",
        back_populates="chat",
        cascade="all, delete-orphan",
    )


class ChatUserModel(Base):
    """Chat membership (composite PK on chat_id + user_id)."""

    __tablename__ = "chat_users"

    chat_id: Mapped[str] = mapped_column(
        Text,
        ForeignKey("chats.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    chat: Mapped["ChatModel"] = relationship("ChatModel", back_populates="members")
    user: Mapped["ProfileModel"] = relationship("ProfileModel", back_populates="chat_memberships")
