"""Create display_messages table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "display_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("message_text", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_display_messages_is_active"), "display_messages", ["is_active"])
    op.create_index(op.f("ix_display_messages_created_at"), "display_messages", ["created_at"])


def downgrade() -> None:
    op.drop_index(op.f("ix_display_messages_created_at"), table_name="display_messages")
    op.drop_index(op.f("ix_display_messages_is_active"), table_name="display_messages")
    op.drop_table("display_messages")
