"""
SQLAlchemy 2.0 Models for Counsel.

Uses modern declarative syntax with Mapped[] type annotations.
Column types are portable (Uuid, DateTime, String) so the same models run on
PostgreSQL in production and SQLite in tests. Enum-valued columns are stored
as short strings and validated at the API boundary.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counsel.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================


class UserRole(str, PyEnum):
    """Account role."""

    STUDENT = "student"
    COUNSELOR = "counselor"
    ADMIN = "admin"


class ConversationCategory(str, PyEnum):
    """Topic a student picks when opening a conversation."""

    ACADEMIC = "academic"
    EMOTIONAL = "emotional"
    RELATIONSHIP = "relationship"
    FAMILY = "family"
    TRAUMA = "trauma"
    OTHER = "other"


class ConversationUrgency(str, PyEnum):
    """Urgency bucket used for counselor triage."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class ConversationStatus(str, PyEnum):
    """Lifecycle status of a conversation."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SenderType(str, PyEnum):
    """Role of a message author, captured when the message is sent."""

    STUDENT = "student"
    COUNSELOR = "counselor"


OPEN_STATUSES = (ConversationStatus.NEW, ConversationStatus.IN_PROGRESS)


# =============================================================================
# MODELS
# =============================================================================


class User(Base):
    """
    Account for a student, counselor or admin.

    Credentials are stored as bcrypt hashes only. The recovery hash backs the
    downloadable recovery file handed out at registration.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'counselor', 'admin')", name="valid_role"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    recovery_key_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(30), nullable=False, default=UserRole.STUDENT.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    conversations: Mapped[list["Conversation"]] = relationship(
        "Conversation",
        back_populates="user",
        foreign_keys="Conversation.user_id",
        passive_deletes=True,
    )


class Conversation(Base):
    """
    Support thread opened by a student.

    `assigned_to` stays NULL until a counselor claims the conversation.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        Index("idx_conversations_status_urgency", "status", "urgency"),
        Index("idx_conversations_assigned_status", "assigned_to", "status"),
        CheckConstraint(
            "category IN ('academic', 'emotional', 'relationship', 'family', 'trauma', 'other')",
            name="valid_category",
        ),
        CheckConstraint("urgency IN ('low', 'medium', 'high', 'emergency')", name="valid_urgency"),
        CheckConstraint("status IN ('new', 'in_progress', 'resolved', 'closed')", name="valid_status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    urgency: Mapped[str] = mapped_column(
        String(30), nullable=False, default=ConversationUrgency.MEDIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=ConversationStatus.NEW.value
    )
    assigned_to: Mapped[Optional[UUID]] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="conversations", foreign_keys=[user_id]
    )
    counselor: Mapped[Optional["User"]] = relationship("User", foreign_keys=[assigned_to])
    messages: Mapped[list["Message"]] = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
        passive_deletes=True,
    )


class Message(Base):
    """One turn in a conversation."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_conversation_created", "conversation_id", "created_at"),
        Index("idx_messages_unread", "conversation_id", "sender_type", "is_read"),
        CheckConstraint("sender_type IN ('student', 'counselor')", name="valid_sender_type"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    conversation_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[UUID] = mapped_column(Uuid(), nullable=False, index=True)
    sender_type: Mapped[str] = mapped_column(String(30), nullable=False)
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    conversation: Mapped["Conversation"] = relationship("Conversation", back_populates="messages")
