"""Conversation lifecycle, role-scoped listing and the counselor priority queue."""

import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from counsel.db.models import (
    OPEN_STATUSES,
    Conversation,
    ConversationStatus,
    ConversationUrgency,
    Message,
    SenderType,
    User,
    UserRole,
)
from counsel.errors import NotFoundError
from counsel.schemas.conversations import (
    ConversationCreate,
    ConversationRead,
    ConversationStatistics,
    ConversationUpdate,
)
from counsel.services import access_policy
from counsel.services.access_policy import Caller, role_of
from counsel.services.ranking import rank_conversations

logger = logging.getLogger(__name__)

_OPEN_STATUS_VALUES = [s.value for s in OPEN_STATUSES]


def _with_thread():
    return select(Conversation).options(
        selectinload(Conversation.user),
        selectinload(Conversation.messages),
    )


def present(conversation: Conversation) -> ConversationRead:
    """Serialize a loaded conversation with anonymity redaction applied."""
    return access_policy.redact_conversation(ConversationRead.model_validate(conversation))


class ConversationService:
    """Create, read, rank and update conversations on behalf of a caller."""

    async def _load(self, db: AsyncSession, conversation_id: UUID) -> Conversation:
        result = await db.execute(
            _with_thread()
            .where(Conversation.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        conversation = result.scalar_one_or_none()
        if conversation is None:
            raise NotFoundError("Conversation not found")
        return conversation

    async def _require_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def create(
        self, db: AsyncSession, owner: Caller, data: ConversationCreate
    ) -> ConversationRead:
        """Open a conversation and store the student's first message with it."""
        access_policy.ensure_can_create_conversation(owner)

        conversation = Conversation(
            user_id=owner.id,
            category=data.category,
            urgency=data.urgency,
            is_anonymous=data.is_anonymous,
            status=ConversationStatus.NEW.value,
        )
        db.add(conversation)
        await db.flush()

        db.add(
            Message(
                conversation_id=conversation.id,
                sender_id=owner.id,
                sender_type=SenderType.STUDENT.value,
                message_text=data.initial_message,
                is_read=False,
            )
        )
        await db.commit()

        logger.info(
            "Conversation %s opened (category=%s, urgency=%s)",
            conversation.id,
            conversation.category,
            conversation.urgency,
        )
        return present(await self._load(db, conversation.id))

    async def list_for_student(self, db: AsyncSession, student: Caller) -> list[ConversationRead]:
        result = await db.execute(
            _with_thread()
            .where(Conversation.user_id == student.id)
            .order_by(Conversation.created_at.desc())
        )
        return [present(c) for c in result.scalars().all()]

    async def list_all(self, db: AsyncSession, caller: Caller) -> list[ConversationRead]:
        """Admins see everything; counselors see what is assigned to them."""
        access_policy.ensure_can_list_all(caller)

        query = _with_thread()
        if role_of(caller) is UserRole.COUNSELOR:
            query = query.where(Conversation.assigned_to == caller.id)
        query = query.order_by(Conversation.created_at.desc())

        result = await db.execute(query)
        return [present(c) for c in result.scalars().all()]

    async def priority_queue(
        self,
        db: AsyncSession,
        caller: Caller,
        status: str | None = None,
        assigned_to: UUID | None = None,
    ) -> list[ConversationRead]:
        """
        Conversations in triage order.

        Filters:
        - status: only that status; defaults to new + in_progress
        - assigned_to: one counselor (admins only; counselors are always
          scoped to their own conversations plus unclaimed ones)
        """
        query = _with_thread()

        if status:
            query = query.where(Conversation.status == status)
        else:
            query = query.where(Conversation.status.in_(_OPEN_STATUS_VALUES))

        if role_of(caller) is UserRole.COUNSELOR:
            query = query.where(
                or_(Conversation.assigned_to == caller.id, Conversation.assigned_to.is_(None))
            )
        elif assigned_to:
            query = query.where(Conversation.assigned_to == assigned_to)

        result = await db.execute(query)
        return [present(c) for c in rank_conversations(result.scalars().all())]

    async def get(self, db: AsyncSession, conversation_id: UUID, caller: Caller) -> ConversationRead:
        conversation = await self._load(db, conversation_id)
        access_policy.ensure_can_access(caller, conversation)
        return present(conversation)

    async def update(
        self,
        db: AsyncSession,
        conversation_id: UUID,
        data: ConversationUpdate,
        caller: Caller,
    ) -> ConversationRead:
        conversation = await self._load(db, conversation_id)
        access_policy.ensure_can_mutate(caller, conversation)

        if data.assigned_to is not None:
            await self._require_user(db, data.assigned_to)
            conversation.assigned_to = data.assigned_to
        if data.status is not None:
            conversation.status = data.status

        await db.commit()
        logger.info(
            "Conversation %s updated by %s (status=%s, assigned_to=%s)",
            conversation_id,
            caller.id,
            conversation.status,
            conversation.assigned_to,
        )
        return present(await self._load(db, conversation_id))

    async def assign(
        self,
        db: AsyncSession,
        conversation_id: UUID,
        counselor_id: UUID,
        caller: Caller,
    ) -> ConversationRead:
        """
        Bind a conversation to a counselor and mark it in progress.

        An existing assignment is overwritten; concurrent assignments resolve
        last-write-wins.
        """
        access_policy.ensure_can_assign(caller)
        conversation = await self._load(db, conversation_id)
        await self._require_user(db, counselor_id)

        previous = conversation.assigned_to
        conversation.assigned_to = counselor_id
        conversation.status = ConversationStatus.IN_PROGRESS.value
        await db.commit()

        if previous is not None and previous != counselor_id:
            logger.info(
                "Conversation %s reassigned from %s to %s by %s",
                conversation_id,
                previous,
                counselor_id,
                caller.id,
            )
        else:
            logger.info("Conversation %s assigned to %s by %s", conversation_id, counselor_id, caller.id)
        return present(await self._load(db, conversation_id))

    async def toggle_anonymity(
        self, db: AsyncSession, conversation_id: UUID, caller: Caller
    ) -> ConversationRead:
        conversation = await self._load(db, conversation_id)
        access_policy.ensure_can_toggle_anonymity(caller, conversation)

        conversation.is_anonymous = not conversation.is_anonymous
        await db.commit()

        logger.info("Conversation %s anonymity set to %s", conversation_id, conversation.is_anonymous)
        return present(await self._load(db, conversation_id))

    async def statistics(self, db: AsyncSession, caller: Caller) -> ConversationStatistics:
        """Dashboard counts scoped to what the caller can see."""
        role = role_of(caller)
        scope = []
        if role is UserRole.COUNSELOR:
            scope.append(Conversation.assigned_to == caller.id)
        elif role is UserRole.STUDENT:
            scope.append(Conversation.user_id == caller.id)

        async def _count(*criteria) -> int:
            stmt = select(func.count()).select_from(Conversation)
            for criterion in (*scope, *criteria):
                stmt = stmt.where(criterion)
            result = await db.execute(stmt)
            return result.scalar() or 0

        return ConversationStatistics(
            total=await _count(),
            new=await _count(Conversation.status == ConversationStatus.NEW.value),
            in_progress=await _count(Conversation.status == ConversationStatus.IN_PROGRESS.value),
            resolved=await _count(Conversation.status == ConversationStatus.RESOLVED.value),
            closed=await _count(Conversation.status == ConversationStatus.CLOSED.value),
            emergency=await _count(
                Conversation.urgency == ConversationUrgency.EMERGENCY.value,
                Conversation.status.in_(_OPEN_STATUS_VALUES),
            ),
        )


conversation_service = ConversationService()
