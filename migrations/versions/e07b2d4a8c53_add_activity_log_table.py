"""add_activity_log_table

Revision ID: e07b2d4a8c53
Revises: c62f0e9b4d18
Create Date: 2026-03-04 17:02:13.640921

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "e07b2d4a8c53"
down_revision: str | Sequence[str] | None = "c62f0e9b4d18"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create activity_log table."""
    op.create_table(
        "activity_log",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("actor_id", sa.UUID(), nullable=True),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.UUID(), nullable=False),
        sa.Column("changes", postgresql.JSONB(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_log_actor_id", "activity_log", ["actor_id"], unique=False)
    op.create_index(
        "ix_activity_log_entity",
        "activity_log",
        ["entity_type", "entity_id", sa.text("created_at DESC")],
        unique=False,
    )


def downgrade() -> None:
    """Drop activity_log table."""
    op.drop_index("ix_activity_log_entity", table_name="activity_log")
    op.drop_index("ix_activity_log_actor_id", table_name="activity_log")
    op.drop_table("activity_log")
