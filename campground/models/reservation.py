"""Reservation models."""
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campground.core.dates import DateRange
from campground.db.base import Base
from campground.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from campground.models.extra import ReservationExtra
    from campground.models.pitch import Pitch


class PaymentStatus(str, enum.Enum):
    """Payment lifecycle driven by provider callbacks."""

    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class Reservation(TimestampMixin, Base):
    """A guest stay on a pitch for ``[start_date, end_date)``."""

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_reservations_range"),
        Index("ix_reservations_pitch_dates", "pitch_id", "start_date", "end_date"),
        Index("ix_reservations_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pitch_id: Mapped[int | None] = mapped_column(
        ForeignKey("pitches.id", ondelete="RESTRICT"), nullable=True
    )
    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date: Mapped[date] = mapped_column(Date(), nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False
    )
    nightly_amount_cents: Mapped[int] = mapped_column(Integer(), nullable=False)
    total_amount_cents: Mapped[int] = mapped_column(Integer(), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(160))
    dni: Mapped[str | None] = mapped_column(String(32))
    phone: Mapped[str | None] = mapped_column(String(32))
    license_plate: Mapped[str | None] = mapped_column(String(16))
    access_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    needs_attention: Mapped[bool] = mapped_column(
        Boolean(), default=False, nullable=False
    )

    pitch: Mapped["Pitch | None"] = relationship("Pitch")
    extras: Mapped[list["ReservationExtra"]] = relationship(
        "ReservationExtra",
        back_populates="reservation",
        cascade="all, delete-orphan",
    )

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days
