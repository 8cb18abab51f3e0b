"""Access pass schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class AccessPassRead(BaseModel):
    reservation_id: int
    qr_pass: str
    issued_at: datetime
    expires_at: datetime
    refresh_after_seconds: int
