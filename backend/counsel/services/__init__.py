"""Business logic: access policy, triage ranking and per-entity services."""

from counsel.services.auth import auth_service
from counsel.services.conversations import conversation_service
from counsel.services.messages import message_service
from counsel.services.users import user_service

__all__ = ["auth_service", "conversation_service", "message_service", "user_service"]
