"""Conversation schemas."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from counsel.schemas.base import BaseSchema, IDMixin, TimestampMixin
from counsel.schemas.messages import MessageRead
from counsel.schemas.user import UserSummary

# Type aliases for enums (used as literals for API validation)
ConversationCategoryType = Literal[
    "academic", "emotional", "relationship", "family", "trauma", "other"
]
ConversationUrgencyType = Literal["low", "medium", "high", "emergency"]
ConversationStatusType = Literal["new", "in_progress", "resolved", "closed"]


# Request schemas
class ConversationCreate(BaseSchema):
    """Request to open a conversation together with its first message."""

    category: ConversationCategoryType
    urgency: ConversationUrgencyType = "medium"
    is_anonymous: bool = False
    initial_message: str = Field(..., min_length=1, max_length=1000)


class ConversationUpdate(BaseModel):
    """Status and/or assignment change. All fields optional."""

    status: ConversationStatusType | None = None
    assigned_to: UUID | None = None


# Response schemas
class ConversationRead(BaseSchema, IDMixin, TimestampMixin):
    """Conversation with its owner and message thread."""

    user_id: UUID
    is_anonymous: bool
    category: ConversationCategoryType
    urgency: ConversationUrgencyType
    status: ConversationStatusType
    assigned_to: UUID | None
    user: UserSummary | None = None
    messages: list[MessageRead] = Field(default_factory=list)


class ConversationResponse(BaseSchema):
    message: str
    conversation: ConversationRead


class PriorityQueueResponse(BaseSchema):
    message: str
    conversations: list[ConversationRead]
    urgency_order: list[str]


class ConversationStatistics(BaseSchema):
    """Dashboard counters; `emergency` counts open emergencies only."""

    total: int
    new: int
    in_progress: int
    resolved: int
    closed: int
    emergency: int


class StatisticsResponse(BaseSchema):
    message: str
    statistics: ConversationStatistics
