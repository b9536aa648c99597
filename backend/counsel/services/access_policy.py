"""
Access Control Policy.

Pure predicates deciding whether a caller may act on a conversation or
message, plus the read-time anonymity redaction. Nothing here touches the
database: callers load the entities and pass them in. A "caller" is anything
exposing `id` and `role` (normally the authenticated `User`).

Role summary:
- Students act only on conversations they own.
- Counselors act on conversations that are unassigned or assigned to them;
  sending and read-marking additionally require the assignment.
- Admins may view and update anything but do not take part in messaging.
"""

from typing import Any, Protocol
from uuid import UUID

from counsel.db.models import SenderType, UserRole
from counsel.errors import ForbiddenError
from counsel.schemas.conversations import ConversationRead

ANONYMOUS_USERNAME = "Anonymous"


class Caller(Protocol):
    id: UUID
    role: Any


def role_of(caller: Caller) -> UserRole:
    return UserRole(caller.role)


# =============================================================================
# PREDICATES
# =============================================================================


def can_create_conversation(caller: Caller) -> bool:
    return role_of(caller) is UserRole.STUDENT


def can_access(caller: Caller, conversation: Any) -> bool:
    """Whether the caller may read the conversation and its messages."""
    role = role_of(caller)
    if role is UserRole.ADMIN:
        return True
    if role is UserRole.STUDENT:
        return conversation.user_id == caller.id
    return conversation.assigned_to is None or conversation.assigned_to == caller.id


def can_mutate(caller: Caller, conversation: Any) -> bool:
    """Whether the caller may change status or assignment."""
    role = role_of(caller)
    if role is UserRole.ADMIN:
        return True
    if role is UserRole.STUDENT:
        return False
    return conversation.assigned_to is None or conversation.assigned_to == caller.id


def can_assign(caller: Caller) -> bool:
    # Reassigning an already-assigned conversation is allowed.
    return role_of(caller) in (UserRole.COUNSELOR, UserRole.ADMIN)


def can_toggle_anonymity(caller: Caller, conversation: Any) -> bool:
    return role_of(caller) is UserRole.STUDENT and conversation.user_id == caller.id


def can_send(caller: Caller, conversation: Any) -> bool:
    role = role_of(caller)
    if role is UserRole.STUDENT:
        return conversation.user_id == caller.id
    if role is UserRole.COUNSELOR:
        return conversation.assigned_to == caller.id
    return False


def can_mark_read(caller: Caller, message: Any, conversation: Any) -> bool:
    """Only the recipient side may mark a message read, and only in its own thread."""
    role = role_of(caller)
    if role is UserRole.ADMIN:
        return False
    if SenderType(message.sender_type) is sender_type_for(role):
        return False
    if role is UserRole.STUDENT:
        return conversation.user_id == caller.id
    return conversation.assigned_to == caller.id


def can_mark_all_read(caller: Caller, conversation: Any) -> bool:
    if role_of(caller) is UserRole.ADMIN:
        return False
    return can_access(caller, conversation)


# =============================================================================
# SENDER TYPES
# =============================================================================


def sender_type_for(role: str | UserRole) -> SenderType:
    """Sender type recorded on a message sent by a caller with this role."""
    role = UserRole(role)
    if role is UserRole.STUDENT:
        return SenderType.STUDENT
    if role is UserRole.COUNSELOR:
        return SenderType.COUNSELOR
    raise ValueError(f"Role {role.value!r} cannot send messages")


def counterpart_sender_type(role: str | UserRole) -> SenderType | None:
    """
    Sender type of "the other party" for a caller.

    Admins have no counterpart; None means messages from either side count.
    """
    role = UserRole(role)
    if role is UserRole.STUDENT:
        return SenderType.COUNSELOR
    if role is UserRole.COUNSELOR:
        return SenderType.STUDENT
    return None


# =============================================================================
# ENFORCEMENT
# =============================================================================


def ensure_can_create_conversation(caller: Caller) -> None:
    if not can_create_conversation(caller):
        raise ForbiddenError("Only students can create conversations")


def ensure_can_list_all(caller: Caller) -> None:
    if role_of(caller) is UserRole.STUDENT:
        raise ForbiddenError("Students can only view their own conversations")


def ensure_can_access(caller: Caller, conversation: Any) -> None:
    if can_access(caller, conversation):
        return
    if role_of(caller) is UserRole.STUDENT:
        raise ForbiddenError("You can only view your own conversations")
    raise ForbiddenError("You can only view conversations assigned to you")


def ensure_can_mutate(caller: Caller, conversation: Any) -> None:
    if can_mutate(caller, conversation):
        return
    if role_of(caller) is UserRole.STUDENT:
        raise ForbiddenError("Students cannot update conversation status")
    raise ForbiddenError("You can only update conversations assigned to you")


def ensure_can_assign(caller: Caller) -> None:
    if not can_assign(caller):
        raise ForbiddenError("Students cannot assign conversations")


def ensure_can_toggle_anonymity(caller: Caller, conversation: Any) -> None:
    if role_of(caller) is not UserRole.STUDENT:
        raise ForbiddenError("Only students can toggle anonymity")
    if not can_toggle_anonymity(caller, conversation):
        raise ForbiddenError("You can only change anonymity of your own conversations")


def ensure_can_send(caller: Caller, conversation: Any) -> None:
    if can_send(caller, conversation):
        return
    role = role_of(caller)
    if role is UserRole.STUDENT:
        raise ForbiddenError("You can only send messages to your own conversations")
    if role is UserRole.COUNSELOR:
        raise ForbiddenError("You can only send messages to conversations assigned to you")
    raise ForbiddenError("Admins cannot send messages")


def ensure_can_mark_read(caller: Caller, message: Any, conversation: Any) -> None:
    if can_mark_read(caller, message, conversation):
        return
    role = role_of(caller)
    if role is UserRole.ADMIN:
        raise ForbiddenError("Admins cannot change read state")
    if SenderType(message.sender_type) is sender_type_for(role):
        raise ForbiddenError("You cannot mark your own messages as read")
    if role is UserRole.STUDENT:
        raise ForbiddenError("You can only mark messages in your conversations as read")
    raise ForbiddenError("You can only mark messages in your assigned conversations as read")


def ensure_can_mark_all_read(caller: Caller, conversation: Any) -> None:
    if can_mark_all_read(caller, conversation):
        return
    role = role_of(caller)
    if role is UserRole.ADMIN:
        raise ForbiddenError("Admins cannot change read state")
    if role is UserRole.STUDENT:
        raise ForbiddenError("You can only mark messages in your own conversations as read")
    raise ForbiddenError("You can only mark messages in your assigned conversations as read")


# =============================================================================
# REDACTION
# =============================================================================


def redact_conversation(data: ConversationRead) -> ConversationRead:
    """Replace the owner's display name when the conversation is anonymous."""
    if not data.is_anonymous or data.user is None:
        return data
    owner = data.user.model_copy(update={"username": ANONYMOUS_USERNAME})
    return data.model_copy(update={"user": owner})
