"""Initial schema: users, conversations, messages.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Creates the complete Counsel schema:
- Tables: users, conversations, messages
- Indexes: status/urgency triage lookup, assignment lookup, unread lookup
- Check constraints mirroring the API enums
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # USERS TABLE
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("recovery_key_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(30), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('student', 'counselor', 'admin')", name="valid_role"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # ==========================================================================
    # CONVERSATIONS TABLE
    # ==========================================================================
    op.create_table(
        "conversations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("urgency", sa.String(30), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(30), nullable=False, server_default="new"),
        sa.Column("assigned_to", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assigned_to"], ["users.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "category IN ('academic', 'emotional', 'relationship', 'family', 'trauma', 'other')",
            name="valid_category",
        ),
        sa.CheckConstraint("urgency IN ('low', 'medium', 'high', 'emergency')", name="valid_urgency"),
        sa.CheckConstraint("status IN ('new', 'in_progress', 'resolved', 'closed')", name="valid_status"),
    )
    op.create_index("ix_conversations_user_id", "conversations", ["user_id"])
    op.create_index("idx_conversations_status_urgency", "conversations", ["status", "urgency"])
    op.create_index("idx_conversations_assigned_status", "conversations", ["assigned_to", "status"])

    # ==========================================================================
    # MESSAGES TABLE
    # ==========================================================================
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), nullable=False),
        sa.Column("sender_type", sa.String(30), nullable=False),
        sa.Column("message_text", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"], ondelete="CASCADE"),
        sa.CheckConstraint("sender_type IN ('student', 'counselor')", name="valid_sender_type"),
    )
    op.create_index("ix_messages_sender_id", "messages", ["sender_id"])
    op.create_index("idx_messages_conversation_created", "messages", ["conversation_id", "created_at"])
    op.create_index("idx_messages_unread", "messages", ["conversation_id", "sender_type", "is_read"])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table("messages")
    op.drop_table("conversations")
    op.drop_table("users")
