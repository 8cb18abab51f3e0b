"""Bookable extras and the lines written at checkout."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campground.db.base import Base
from campground.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from campground.models.reservation import Reservation


class ExtraPricing(str, enum.Enum):
    """How the quantity of an extra is interpreted."""

    TOGGLE = "toggle"
    METERED = "metered"


class Extra(TimestampMixin, Base):
    """An optional add-on charged per night (extra person, pet, power...)."""

    __tablename__ = "extras"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit_amount_cents: Mapped[int] = mapped_column(Integer(), nullable=False)
    pricing: Mapped[ExtraPricing] = mapped_column(
        Enum(ExtraPricing), default=ExtraPricing.METERED, nullable=False
    )
    max_units: Mapped[int] = mapped_column(Integer(), default=4, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean(), default=True, nullable=False)

    @property
    def unit_limit(self) -> int:
        if self.pricing is ExtraPricing.TOGGLE:
            return 1
        return self.max_units


class ReservationExtra(Base):
    """Immutable priced line for an extra on a reservation."""

    __tablename__ = "reservation_extras"
    __table_args__ = (
        UniqueConstraint("reservation_id", "extra_id", name="uq_reservation_extra"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reservation_id: Mapped[int] = mapped_column(
        ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False
    )
    extra_id: Mapped[int] = mapped_column(
        ForeignKey("extras.id", ondelete="RESTRICT"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer(), nullable=False)
    unit_amount_cents: Mapped[int] = mapped_column(Integer(), nullable=False)
    line_total_cents: Mapped[int] = mapped_column(Integer(), nullable=False)

    reservation: Mapped["Reservation"] = relationship(
        "Reservation", back_populates="extras"
    )
    extra: Mapped["Extra"] = relationship("Extra", lazy="joined")
