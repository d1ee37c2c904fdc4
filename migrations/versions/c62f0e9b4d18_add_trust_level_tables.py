"""add_trust_level_tables

Revision ID: c62f0e9b4d18
Revises: 8d3a5f1e6b72
Create Date: 2026-03-04 16:20:51.904377

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c62f0e9b4d18"
down_revision: str | Sequence[str] | None = "8d3a5f1e6b72"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create trust_levels and guest_trust_assignments tables."""
    op.create_table(
        "trust_levels",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("owner_id", sa.UUID(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column(
            "discount_percentage",
            sa.Numeric(precision=5, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("level BETWEEN 1 AND 5", name="ck_trust_levels_level"),
        sa.CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="ck_trust_levels_discount",
        ),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "level", name="uq_trust_levels_owner_level"),
    )
    op.create_index("ix_trust_levels_owner_id", "trust_levels", ["owner_id"], unique=False)

    op.create_table(
        "guest_trust_assignments",
        sa.Column("owner_id", sa.UUID(), nullable=False),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("trust_level_id", sa.UUID(), nullable=False),
        sa.Column("assigned_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["guest_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["trust_level_id"], ["trust_levels.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("owner_id", "guest_id"),
    )
    op.create_index(
        "ix_guest_trust_assignments_trust_level_id",
        "guest_trust_assignments",
        ["trust_level_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop trust level tables."""
    op.drop_index(
        "ix_guest_trust_assignments_trust_level_id", table_name="guest_trust_assignments"
    )
    op.drop_table("guest_trust_assignments")
    op.drop_index("ix_trust_levels_owner_id", table_name="trust_levels")
    op.drop_table("trust_levels")
