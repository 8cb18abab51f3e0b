"""Operator accounts."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from campground.db.base import Base
from campground.models.mixins import TimestampMixin


class Owner(TimestampMixin, Base):
    """An auth subject with operator rights over the campground."""

    __tablename__ = "owners"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(120))
