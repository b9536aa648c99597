"""Conversation routes: creation, role-scoped reads, triage queue and updates."""

from uuid import UUID

from fastapi import APIRouter, status

from counsel.api.deps import CurrentUser, DbSession, StaffUser, StudentUser
from counsel.db.models import UserRole
from counsel.schemas.conversations import (
    ConversationCreate,
    ConversationRead,
    ConversationResponse,
    ConversationStatusType,
    ConversationUpdate,
    PriorityQueueResponse,
    StatisticsResponse,
)
from counsel.services import conversation_service
from counsel.services.ranking import URGENCY_ORDER

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    data: ConversationCreate,
    current_user: StudentUser,
    db: DbSession,
) -> ConversationResponse:
    """Open a new conversation with an initial message (students only)."""
    conversation = await conversation_service.create(db, current_user, data)
    return ConversationResponse(message="Conversation created successfully", conversation=conversation)


@router.get("", response_model=list[ConversationRead])
async def list_conversations(current_user: CurrentUser, db: DbSession) -> list[ConversationRead]:
    """
    List conversations visible to the caller.

    Students get their own; counselors get those assigned to them; admins get
    everything. Newest first.
    """
    if current_user.role == UserRole.STUDENT.value:
        return await conversation_service.list_for_student(db, current_user)
    return await conversation_service.list_all(db, current_user)


@router.get("/priority-queue", response_model=PriorityQueueResponse)
async def get_priority_queue(
    current_user: StaffUser,
    db: DbSession,
    status: ConversationStatusType | None = None,
    assigned_to: UUID | None = None,
) -> PriorityQueueResponse:
    """
    Open conversations in triage order: emergency, high, medium, low, and
    oldest first within each urgency.

    Filters:
    - status: a single status instead of the default new + in_progress
    - assigned_to: one counselor (admins only)
    """
    conversations = await conversation_service.priority_queue(
        db, current_user, status=status, assigned_to=assigned_to
    )
    return PriorityQueueResponse(
        message="Priority queue retrieved successfully",
        conversations=conversations,
        urgency_order=URGENCY_ORDER,
    )


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(current_user: CurrentUser, db: DbSession) -> StatisticsResponse:
    """Counts by status plus open emergencies, scoped to the caller."""
    statistics = await conversation_service.statistics(db, current_user)
    return StatisticsResponse(message="Statistics retrieved successfully", statistics=statistics)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> ConversationResponse:
    conversation = await conversation_service.get(db, conversation_id, current_user)
    return ConversationResponse(message="Conversation retrieved successfully", conversation=conversation)


@router.patch("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: UUID,
    data: ConversationUpdate,
    current_user: StaffUser,
    db: DbSession,
) -> ConversationResponse:
    """Change status and/or assignment (counselors on their own or unclaimed conversations, admins on any)."""
    conversation = await conversation_service.update(db, conversation_id, data, current_user)
    return ConversationResponse(message="Conversation updated successfully", conversation=conversation)


@router.patch("/{conversation_id}/assign/{counselor_id}", response_model=ConversationResponse)
async def assign_conversation(
    conversation_id: UUID,
    counselor_id: UUID,
    current_user: StaffUser,
    db: DbSession,
) -> ConversationResponse:
    """Assign to a counselor and move to in_progress."""
    conversation = await conversation_service.assign(db, conversation_id, counselor_id, current_user)
    return ConversationResponse(message="Conversation assigned successfully", conversation=conversation)


@router.patch("/{conversation_id}/toggle-anonymity", response_model=ConversationResponse)
async def toggle_anonymity(
    conversation_id: UUID,
    current_user: StudentUser,
    db: DbSession,
) -> ConversationResponse:
    conversation = await conversation_service.toggle_anonymity(db, conversation_id, current_user)
    state = "enabled" if conversation.is_anonymous else "disabled"
    return ConversationResponse(message=f"Anonymity {state} successfully", conversation=conversation)
