"""Pydantic schemas for API request/response validation."""

from counsel.schemas.user import UserRead, UserSummary
from counsel.schemas.auth import (
    LoginRequest,
    RecoverRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from counsel.schemas.conversations import (
    ConversationCreate,
    ConversationRead,
    ConversationUpdate,
)
from counsel.schemas.messages import MessageCreate, MessageRead

__all__ = [
    # User
    "UserRead",
    "UserSummary",
    # Auth
    "LoginRequest",
    "RecoverRequest",
    "RegisterRequest",
    "RegisterResponse",
    "TokenResponse",
    # Conversations
    "ConversationCreate",
    "ConversationRead",
    "ConversationUpdate",
    # Messages
    "MessageCreate",
    "MessageRead",
]
