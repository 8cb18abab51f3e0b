"""Pitch registry model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campground.db.base import Base
from campground.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from campground.models.block import Block


class Pitch(TimestampMixin, Base):
    """A single bookable camping spot."""

    __tablename__ = "pitches"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean(), default=True, nullable=False)

    blocks: Mapped[list["Block"]] = relationship(
        "Block", back_populates="pitch", cascade="all, delete-orphan"
    )
