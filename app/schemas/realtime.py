"""Realtime event payloads.

Wire frames are JSON objects {"event": name, "data": {...}} with camelCase
keys inside data.
"""

from typing import Any

from pydantic import BaseModel, Field


class ClientFrame(BaseModel):
    event: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class MessageSend(BaseModel):
    receiver_id: str = Field(alias="receiverId", min_length=1)
    message: Any

    model_config = {"populate_by_name": True}


class TypingSignal(BaseModel):
    receiver_id: str = Field(alias="receiverId", min_length=1)

    model_config = {"populate_by_name": True}
