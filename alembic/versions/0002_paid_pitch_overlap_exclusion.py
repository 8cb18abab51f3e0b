"""Exclusion constraint against overlapping paid stays on one pitch.

Half-open ``daterange(start_date, end_date, '[)')`` matches the application
overlap rule, so a checkout and a check-in on the same day do not collide.
PostgreSQL only; other backends rely on the assignment lock alone.

Revision ID: 0002
Revises: 0001
Create Date: 2025-06-09
"""

from __future__ import annotations

from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

_CONSTRAINT = "ex_reservations_paid_pitch_overlap"


def upgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        f"""
        ALTER TABLE reservations
        ADD CONSTRAINT {_CONSTRAINT}
        EXCLUDE USING gist (
            pitch_id WITH =,
            daterange(start_date, end_date, '[)') WITH &&
        )
        WHERE (payment_status = 'PAID' AND pitch_id IS NOT NULL)
        """
    )


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute(f"ALTER TABLE reservations DROP CONSTRAINT IF EXISTS {_CONSTRAINT}")
