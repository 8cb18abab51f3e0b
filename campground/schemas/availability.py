"""Availability schemas."""
from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class AvailabilityRead(BaseModel):
    start_date: date
    end_date: date
    available: bool
    pitch_id: int | None = None
    message: str | None = None


class SoldOutDates(BaseModel):
    from_date: date
    to_date: date
    dates: list[date]
