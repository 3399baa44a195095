"""Add conversation and message tables

Revision ID: 20260301_add_conversation_tables
Revises:
Create Date: 2026-03-01 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260301_add_conversation_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create conversation table
    op.create_table(
        "conversation",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("owner_id", sa.String(100), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    # Create message table
    op.create_table(
        "message",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("conversation_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),  # 'user' or 'assistant'
        sa.Column("content", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    op.create_foreign_key(
        "fk_message_conversation_id",
        "message",
        "conversation",
        ["conversation_id"],
        ["id"],
        ondelete="CASCADE",
    )

    # Owner listings are newest first; messages are read per conversation in order
    op.create_index("ix_conversation_owner_id", "conversation", ["owner_id"])
    op.create_index("ix_conversation_created_at", "conversation", ["created_at"])
    op.create_index("ix_message_conversation_id", "message", ["conversation_id"])
    op.create_index("ix_message_created_at", "message", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_message_created_at", table_name="message")
    op.drop_index("ix_message_conversation_id", table_name="message")
    op.drop_index("ix_conversation_created_at", table_name="conversation")
    op.drop_index("ix_conversation_owner_id", table_name="conversation")

    op.drop_constraint("fk_message_conversation_id", "message", type_="foreignkey")

    op.drop_table("message")
    op.drop_table("conversation")
