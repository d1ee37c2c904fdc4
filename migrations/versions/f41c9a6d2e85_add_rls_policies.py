"""add_rls_policies

Revision ID: f41c9a6d2e85
Revises: e07b2d4a8c53
Create Date: 2026-03-04 17:40:36.215093

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "f41c9a6d2e85"
down_revision: str | Sequence[str] | None = "e07b2d4a8c53"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TABLES = [
    "users",
    "properties",
    "invitations",
    "trust_levels",
    "guest_trust_assignments",
    "activity_log",
]


def upgrade() -> None:
    """Add Row Level Security policies for direct Supabase client access.

    The API connects with a service account that bypasses RLS and enforces
    roles in the service layer. These policies only govern what the
    frontend can read through the Supabase client. All writes go through
    the API, so no write policies are granted.
    """
    # SECURITY DEFINER so the role lookup does not recurse into users RLS
    op.execute("""
        CREATE OR REPLACE FUNCTION is_platform_admin(uid UUID)
        RETURNS BOOLEAN
        LANGUAGE sql
        SECURITY DEFINER
        STABLE
        SET search_path = public
        AS $$
            SELECT EXISTS (SELECT 1 FROM users WHERE id = uid AND user_type = 'admin');
        $$;
    """)

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")

    op.execute("""
        CREATE POLICY users_select ON users
            FOR SELECT USING (
                id = (SELECT auth.uid()) OR is_platform_admin((SELECT auth.uid()))
            );
    """)
    # Active listings are visible to every signed-in user
    op.execute("""
        CREATE POLICY properties_select ON properties
            FOR SELECT USING (
                status = 'active'
                OR owner_id = (SELECT auth.uid())
                OR is_platform_admin((SELECT auth.uid()))
            );
    """)
    op.execute("""
        CREATE POLICY invitations_select ON invitations
            FOR SELECT USING (
                invited_by = (SELECT auth.uid()) OR is_platform_admin((SELECT auth.uid()))
            );
    """)
    op.execute("""
        CREATE POLICY trust_levels_select ON trust_levels
            FOR SELECT USING (owner_id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY guest_trust_assignments_select ON guest_trust_assignments
            FOR SELECT USING (
                owner_id = (SELECT auth.uid()) OR guest_id = (SELECT auth.uid())
            );
    """)
    op.execute("""
        CREATE POLICY activity_log_select ON activity_log
            FOR SELECT USING (
                actor_id = (SELECT auth.uid()) OR is_platform_admin((SELECT auth.uid()))
            );
    """)


def downgrade() -> None:
    """Drop all RLS policies and disable RLS."""
    for table in reversed(TABLES):
        op.execute(f"DROP POLICY IF EXISTS {table}_select ON {table};")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")

    op.execute("DROP FUNCTION IF EXISTS is_platform_admin(UUID);")
