"""Chat schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.chat import ChatMessageType


class ChatStart(BaseModel):
    receiver_id: str


class ChatRead(BaseModel):
    """A two-party conversation with its latest message summary."""

    id: str
    participant_a_id: str
    participant_b_id: str
    last_message_content: str | None
    last_message_sender_id: str | None
    last_message_at: datetime | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ChatMessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=10000)
    message_type: ChatMessageType = ChatMessageType.TEXT
    file_url: str | None = Field(default=None, max_length=500)


class ChatMessageRead(BaseModel):
    id: str
    chat_id: str
    sender_id: str
    content: str
    message_type: ChatMessageType
    file_url: str | None
    read_by: list[dict]
    created_at: datetime

    model_config = {"from_attributes": True}
