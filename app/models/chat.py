"""Chat models for two-party conversations.

Messages written here are the durable record. The realtime router only
relays live events and never touches these tables.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class ChatMessageType(str, Enum):
    """Content type of a chat message."""

    TEXT = "text"
    FILE = "file"
    IMAGE = "image"


class Chat(Base, TimestampMixin):
    """Conversation between exactly two users.

    Participant ids are stored in sorted order so a pair maps to a
    single row regardless of who started the chat.
    """

    __tablename__ = "chats"
    __table_args__ = (
        UniqueConstraint("participant_a_id", "participant_b_id", name="uq_chats_participants"),
    )

    participant_a_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    participant_b_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    last_message_content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    last_message_sender_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
    )
    last_message_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    @property
    def participants(self) -> list[str]:
        return [self.participant_a_id, self.participant_b_id]

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant_a_id, self.participant_b_id)


class ChatMessage(Base, TimestampMixin):
    """A message inside a chat."""

    __tablename__ = "chat_messages"

    chat_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("chats.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    message_type: Mapped[ChatMessageType] = mapped_column(
        String(20),
        default=ChatMessageType.TEXT.value,
        nullable=False,
    )
    file_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    # [{"user_id": ..., "read_at": iso timestamp}], one entry per reader
    read_by: Mapped[list[dict]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    def is_read_by(self, user_id: str) -> bool:
        return any(entry.get("user_id") == user_id for entry in self.read_by or [])
