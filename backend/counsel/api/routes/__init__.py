"""API routes package."""

from counsel.api.routes import (
    auth,
    conversations,
    messages,
    users,
)

__all__ = [
    "auth",
    "conversations",
    "messages",
    "users",
]
