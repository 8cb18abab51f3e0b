"""Payment webhook schemas."""
from __future__ import annotations

from pydantic import BaseModel


class PaymentEventIn(BaseModel):
    """Provider callback moving a reservation's payment status."""

    id: str | None = None
    reservation_id: int
    status: str


class PaymentEventResult(BaseModel):
    status: str
