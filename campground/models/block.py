"""Operator-declared unavailability windows on a pitch."""

from __future__ import annotations

import enum
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campground.core.dates import DateRange
from campground.db.base import Base
from campground.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from campground.models.pitch import Pitch


class BlockKind(str, enum.Enum):
    """Reason category for a block."""

    MAINTENANCE = "maintenance"
    OCCUPIED = "occupied"


class Block(TimestampMixin, Base):
    """Blocks a pitch for ``[start_date, end_date)``."""

    __tablename__ = "pitch_blocks"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_pitch_blocks_range"),
        Index("ix_pitch_blocks_pitch_dates", "pitch_id", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    pitch_id: Mapped[int] = mapped_column(
        ForeignKey("pitches.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[BlockKind] = mapped_column(Enum(BlockKind), nullable=False)
    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date: Mapped[date] = mapped_column(Date(), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
    created_by: Mapped[str | None] = mapped_column(String(64))

    pitch: Mapped["Pitch"] = relationship("Pitch", back_populates="blocks")

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)
