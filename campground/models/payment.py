"""Payment webhook event log."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from campground.db.base import Base


JSONB_TYPE = JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")


class PaymentEvent(Base):
    """Raw provider webhook events for auditing and idempotency."""

    __tablename__ = "payment_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_event_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),  # type: ignore[arg-type]
    )
    raw: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
