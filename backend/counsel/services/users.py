"""User directory and cascading account deletion."""

import logging
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from counsel.db.models import Conversation, Message, User, UserRole
from counsel.errors import NotFoundError
from counsel.schemas.user import UserSummary

logger = logging.getLogger(__name__)


class UserService:
    async def list_active_users(self, db: AsyncSession) -> list[User]:
        result = await db.execute(
            select(User).where(User.is_active.is_(True)).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_counselors(self, db: AsyncSession) -> list[User]:
        result = await db.execute(
            select(User)
            .where(User.role == UserRole.COUNSELOR.value, User.is_active.is_(True))
            .order_by(User.username.asc())
        )
        return list(result.scalars().all())

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> UserSummary:
        """
        Hard delete a user and everything attached to them.

        Removes messages in every conversation the user owns or is assigned
        to, then those conversations, then the user row. All three statements
        commit together; a failure part-way rolls everything back.
        """
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        deleted = UserSummary.model_validate(user)

        result = await db.execute(
            select(Conversation.id).where(
                or_(Conversation.user_id == user_id, Conversation.assigned_to == user_id)
            )
        )
        conversation_ids = list(result.scalars().all())

        if conversation_ids:
            await db.execute(delete(Message).where(Message.conversation_id.in_(conversation_ids)))
            await db.execute(delete(Conversation).where(Conversation.id.in_(conversation_ids)))

        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()

        logger.info(
            "Deleted user %s (%s) with %d conversations", user_id, deleted.role, len(conversation_ids)
        )
        return deleted


user_service = UserService()
