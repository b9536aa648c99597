"""Threaded messaging and read-state tracking."""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from counsel.db.models import Conversation, Message, SenderType, UserRole
from counsel.errors import NotFoundError
from counsel.schemas.messages import MessageCreate
from counsel.services import access_policy
from counsel.services.access_policy import Caller, role_of

logger = logging.getLogger(__name__)


class MessageService:
    async def _get_conversation(self, db: AsyncSession, conversation_id: UUID) -> Conversation:
        conversation = await db.get(Conversation, conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        return conversation

    async def send(
        self,
        db: AsyncSession,
        conversation_id: UUID,
        caller: Caller,
        data: MessageCreate,
    ) -> Message:
        """
        Append a message to a conversation.

        The sender type is taken from the caller's role now and never changes
        afterwards. The conversation row itself is not touched.
        """
        conversation = await self._get_conversation(db, conversation_id)
        access_policy.ensure_can_send(caller, conversation)

        message = Message(
            conversation_id=conversation.id,
            sender_id=caller.id,
            sender_type=access_policy.sender_type_for(caller.role).value,
            message_text=data.message_text,
            is_read=False,
        )
        db.add(message)
        await db.commit()
        await db.refresh(message)
        return message

    async def list_for_conversation(
        self, db: AsyncSession, conversation_id: UUID, caller: Caller
    ) -> list[Message]:
        """Messages of a conversation, oldest first."""
        conversation = await self._get_conversation(db, conversation_id)
        access_policy.ensure_can_access(caller, conversation)

        result = await db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
        )
        return list(result.scalars().all())

    async def mark_as_read(
        self,
        db: AsyncSession,
        conversation_id: UUID,
        message_id: UUID,
        caller: Caller,
    ) -> Message:
        message = await db.get(Message, message_id)
        if message is None or message.conversation_id != conversation_id:
            raise NotFoundError("Message not found")

        conversation = await self._get_conversation(db, message.conversation_id)
        access_policy.ensure_can_mark_read(caller, message, conversation)

        if not message.is_read:
            message.is_read = True
            await db.commit()
            await db.refresh(message)
        return message

    async def mark_conversation_as_read(
        self, db: AsyncSession, conversation_id: UUID, caller: Caller
    ) -> int:
        """
        Mark every unread message from the other party as read.

        Issued as one conditional UPDATE, so repeating the call changes
        nothing. Returns the number of messages flipped.
        """
        conversation = await self._get_conversation(db, conversation_id)
        access_policy.ensure_can_mark_all_read(caller, conversation)

        counterpart = access_policy.counterpart_sender_type(caller.role)
        result = await db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_type == counterpart.value,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
        )
        await db.commit()

        marked = result.rowcount or 0
        logger.info(
            "Marked %d %s messages read in conversation %s", marked, counterpart.value, conversation_id
        )
        return marked

    async def get_unread_count(self, db: AsyncSession, caller: Caller) -> int:
        """
        Unread messages from the other party across the caller's conversations.

        Students count counselor messages in conversations they own;
        counselors count student messages in conversations assigned to them;
        admins count every unread message.
        """
        stmt = (
            select(func.count())
            .select_from(Message)
            .join(Conversation, Message.conversation_id == Conversation.id)
            .where(Message.is_read.is_(False))
        )

        role = role_of(caller)
        if role is UserRole.STUDENT:
            stmt = stmt.where(
                Conversation.user_id == caller.id,
                Message.sender_type == SenderType.COUNSELOR.value,
            )
        elif role is UserRole.COUNSELOR:
            stmt = stmt.where(
                Conversation.assigned_to == caller.id,
                Message.sender_type == SenderType.STUDENT.value,
            )

        result = await db.execute(stmt)
        return result.scalar() or 0


message_service = MessageService()
