"""Message schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from counsel.schemas.base import BaseSchema, IDMixin

SenderTypeType = Literal["student", "counselor"]


class MessageCreate(BaseSchema):
    """Request to send a message."""

    message_text: str = Field(..., min_length=1, max_length=2000)


class MessageRead(BaseSchema, IDMixin):
    conversation_id: UUID
    sender_id: UUID
    sender_type: SenderTypeType
    message_text: str
    is_read: bool
    created_at: datetime


class MessageResponse(BaseSchema):
    message: str
    data: MessageRead


class MessageListResponse(BaseSchema):
    message: str
    messages: list[MessageRead]
    count: int


class MarkAllReadResponse(BaseSchema):
    message: str
    marked: int = Field(..., description="Number of messages flipped to read by this call")


class UnreadCountResponse(BaseSchema):
    message: str
    unread_count: int
