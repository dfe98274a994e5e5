"""Persistent two-party chat service."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.chat import Chat, ChatMessage, ChatMessageType
from app.models.user import User
from app.utils.time import format_datetime, utc_now

logger = logging.getLogger(__name__)


class ChatService:
    """Service for chats and their stored messages.

    Live delivery goes through the realtime router; this service only
    keeps the history.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def start(self, user_id: str, receiver_id: str) -> Chat:
        """Find or create the chat between two users.

        Raises:
            ValidationError: If a user tries to chat with themselves
            NotFoundError: If the receiver does not exist
        """
        if receiver_id == user_id:
            raise ValidationError("Cannot start a chat with yourself")

        receiver = await self.session.scalar(
            select(User).where(User.id == receiver_id, User.is_deleted.is_(False))
        )
        if not receiver:
            raise NotFoundError("User not found")

        participant_a_id, participant_b_id = sorted((user_id, receiver_id))
        chat = await self.session.scalar(
            select(Chat).where(
                Chat.participant_a_id == participant_a_id,
                Chat.participant_b_id == participant_b_id,
            )
        )
        if chat:
            return chat

        chat = Chat(
            participant_a_id=participant_a_id,
            participant_b_id=participant_b_id,
            is_active=True,
        )
        self.session.add(chat)
        await self.session.commit()
        await self.session.refresh(chat)

        logger.info(f"Chat {chat.id[:8]} started by {user_id[:8]}")
        return chat

    async def list_for(self, user_id: str) -> list[Chat]:
        """A user's active chats, most recent message first."""
        result = await self.session.execute(
            select(Chat)
            .where(
                or_(Chat.participant_a_id == user_id, Chat.participant_b_id == user_id),
                Chat.is_active.is_(True),
            )
            .order_by(Chat.last_message_at.desc().nullslast(), Chat.created_at.desc())
        )
        return list(result.scalars().all())

    async def _get_for_participant(self, chat_id: str, user_id: str) -> Chat:
        chat = await self.session.scalar(select(Chat).where(Chat.id == chat_id))
        if not chat:
            raise NotFoundError("Chat not found")
        if not chat.has_participant(user_id):
            raise ForbiddenError("Not a participant in this chat")
        return chat

    async def get_messages(self, chat_id: str, user_id: str) -> list[ChatMessage]:
        """Messages in send order; marks the others' messages read by the caller.

        Raises:
            NotFoundError: If the chat does not exist
            ForbiddenError: If the caller is not a participant
        """
        await self._get_for_participant(chat_id, user_id)

        result = await self.session.execute(
            select(ChatMessage)
            .where(ChatMessage.chat_id == chat_id)
            .order_by(ChatMessage.created_at.asc())
        )
        messages = list(result.scalars().all())

        read_at = format_datetime(utc_now())
        marked = 0
        for message in messages:
            if message.sender_id != user_id and not message.is_read_by(user_id):
                # Reassign so the JSON column is flagged dirty
                message.read_by = [*(message.read_by or []), {"user_id": user_id, "read_at": read_at}]
                marked += 1

        if marked:
            await self.session.commit()

        return messages

    async def send(
        self,
        chat_id: str,
        sender_id: str,
        content: str,
        message_type: ChatMessageType = ChatMessageType.TEXT,
        file_url: str | None = None,
    ) -> ChatMessage:
        """Append a message and refresh the chat's last-message summary."""
        chat = await self._get_for_participant(chat_id, sender_id)

        message = ChatMessage(
            chat_id=chat.id,
            sender_id=sender_id,
            content=content,
            message_type=ChatMessageType(message_type).value,
            file_url=file_url,
            read_by=[],
        )
        self.session.add(message)

        chat.last_message_content = content
        chat.last_message_sender_id = sender_id
        chat.last_message_at = utc_now()

        await self.session.commit()
        await self.session.refresh(message)
        return message
