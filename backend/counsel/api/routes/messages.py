"""Message routes nested under a conversation, plus the unread counter."""

from uuid import UUID

from fastapi import APIRouter, status

from counsel.api.deps import CurrentUser, DbSession
from counsel.schemas.messages import (
    MarkAllReadResponse,
    MessageCreate,
    MessageListResponse,
    MessageRead,
    MessageResponse,
    UnreadCountResponse,
)
from counsel.services import message_service

router = APIRouter(prefix="/conversations/{conversation_id}/messages", tags=["messages"])
stats_router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    conversation_id: UUID,
    data: MessageCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageResponse:
    message = await message_service.send(db, conversation_id, current_user, data)
    return MessageResponse(message="Message sent successfully", data=MessageRead.model_validate(message))


@router.get("", response_model=MessageListResponse)
async def list_messages(
    conversation_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageListResponse:
    """All messages in a conversation, oldest first."""
    messages = await message_service.list_for_conversation(db, conversation_id, current_user)
    return MessageListResponse(
        message="Messages retrieved successfully",
        messages=[MessageRead.model_validate(m) for m in messages],
        count=len(messages),
    )


@router.patch("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(
    conversation_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> MarkAllReadResponse:
    """Mark every unread message from the other party as read."""
    marked = await message_service.mark_conversation_as_read(db, conversation_id, current_user)
    return MarkAllReadResponse(message="All messages marked as read successfully", marked=marked)


@router.patch("/{message_id}/read", response_model=MessageResponse)
async def mark_read(
    conversation_id: UUID,
    message_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageResponse:
    message = await message_service.mark_as_read(db, conversation_id, message_id, current_user)
    return MessageResponse(message="Message marked as read", data=MessageRead.model_validate(message))


@stats_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(current_user: CurrentUser, db: DbSession) -> UnreadCountResponse:
    count = await message_service.get_unread_count(db, current_user)
    return UnreadCountResponse(message="Unread count retrieved successfully", unread_count=count)
