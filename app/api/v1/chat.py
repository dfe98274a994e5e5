"""Chat history endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import DbSession, require_permissions
from app.models.user import User
from app.schemas.chat import ChatMessageCreate, ChatMessageRead, ChatRead, ChatStart
from app.services.chat import ChatService
from app.services.rbac import Permission

router = APIRouter()

ChatUser = Annotated[User, Depends(require_permissions(Permission.CHAT))]


@router.post(
    "/start",
    response_model=ChatRead,
    status_code=status.HTTP_200_OK,
    summary="Start chat",
    description="Find or create the conversation with another user",
)
async def start_chat(data: ChatStart, session: DbSession, user: ChatUser) -> ChatRead:
    """Open a chat with another user.

    Raises:
        ValidationError: If the receiver is the caller
        NotFoundError: If the receiver does not exist
    """
    chat = await ChatService(session).start(user.id, data.receiver_id)
    return ChatRead.model_validate(chat)


@router.get(
    "",
    response_model=list[ChatRead],
    summary="My chats",
)
async def list_chats(session: DbSession, user: ChatUser) -> list[ChatRead]:
    chats = await ChatService(session).list_for(user.id)
    return [ChatRead.model_validate(c) for c in chats]


@router.get(
    "/{chat_id}/messages",
    response_model=list[ChatMessageRead],
    summary="Chat messages",
    description="Messages in send order; marks incoming messages as read",
)
async def get_messages(chat_id: str, session: DbSession, user: ChatUser) -> list[ChatMessageRead]:
    messages = await ChatService(session).get_messages(chat_id, user.id)
    return [ChatMessageRead.model_validate(m) for m in messages]


@router.post(
    "/{chat_id}/messages",
    response_model=ChatMessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send message",
)
async def send_message(
    chat_id: str,
    data: ChatMessageCreate,
    session: DbSession,
    user: ChatUser,
) -> ChatMessageRead:
    """Store a message in a chat.

    Raises:
        NotFoundError: If the chat does not exist
        ForbiddenError: If the caller is not a participant
    """
    message = await ChatService(session).send(
        chat_id=chat_id,
        sender_id=user.id,
        content=data.content,
        message_type=data.message_type,
        file_url=data.file_url,
    )
    return ChatMessageRead.model_validate(message)
