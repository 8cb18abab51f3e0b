"""Initial campground schema.

Revision ID: 0001
Revises:
Create Date: 2025-06-02
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

payment_status = sa.Enum("UNPAID", "PENDING", "PAID", "REFUNDED", name="paymentstatus")
block_kind = sa.Enum("MAINTENANCE", "OCCUPIED", name="blockkind")
extra_pricing = sa.Enum("TOGGLE", "METERED", name="extrapricing")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "pitches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "owners",
        sa.Column("user_id", sa.String(length=64), primary_key=True),
        sa.Column("display_name", sa.String(length=120)),
        *_timestamps(),
    )

    op.create_table(
        "extras",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=32), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("unit_amount_cents", sa.Integer(), nullable=False),
        sa.Column("pricing", extra_pricing, nullable=False),
        sa.Column("max_units", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "pitch_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "pitch_id",
            sa.Integer(),
            sa.ForeignKey("pitches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", block_kind, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(length=255)),
        sa.Column("created_by", sa.String(length=64)),
        *_timestamps(),
        sa.CheckConstraint("end_date > start_date", name="ck_pitch_blocks_range"),
    )
    op.create_index(
        "ix_pitch_blocks_pitch_dates",
        "pitch_blocks",
        ["pitch_id", "start_date", "end_date"],
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "pitch_id",
            sa.Integer(),
            sa.ForeignKey("pitches.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("payment_status", payment_status, nullable=False),
        sa.Column("nightly_amount_cents", sa.Integer(), nullable=False),
        sa.Column("total_amount_cents", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(length=160)),
        sa.Column("dni", sa.String(length=32)),
        sa.Column("phone", sa.String(length=32)),
        sa.Column("license_plate", sa.String(length=16)),
        sa.Column("access_expires_at", sa.DateTime(timezone=True)),
        sa.Column(
            "needs_attention", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        *_timestamps(),
        sa.CheckConstraint("end_date > start_date", name="ck_reservations_range"),
    )
    op.create_index(
        "ix_reservations_pitch_dates",
        "reservations",
        ["pitch_id", "start_date", "end_date"],
    )
    op.create_index("ix_reservations_user", "reservations", ["user_id"])

    op.create_table(
        "reservation_extras",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey("reservations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "extra_id",
            sa.Integer(),
            sa.ForeignKey("extras.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_amount_cents", sa.Integer(), nullable=False),
        sa.Column("line_total_cents", sa.Integer(), nullable=False),
        sa.UniqueConstraint("reservation_id", "extra_id", name="uq_reservation_extra"),
    )

    op.create_table(
        "payment_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("provider_event_id", sa.String(length=255), nullable=False, unique=True),
        sa.Column(
            "received_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "raw",
            postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite"),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("payment_events")
    op.drop_table("reservation_extras")
    op.drop_index("ix_reservations_user", table_name="reservations")
    op.drop_index("ix_reservations_pitch_dates", table_name="reservations")
    op.drop_table("reservations")
    op.drop_index("ix_pitch_blocks_pitch_dates", table_name="pitch_blocks")
    op.drop_table("pitch_blocks")
    op.drop_table("extras")
    op.drop_table("owners")
    op.drop_table("pitches")

    bind = op.get_bind()
    payment_status.drop(bind, checkfirst=True)
    block_kind.drop(bind, checkfirst=True)
    extra_pricing.drop(bind, checkfirst=True)
