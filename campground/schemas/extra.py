"""Extras catalog schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from campground.models.extra import ExtraPricing


class ExtraRead(BaseModel):
    id: int
    code: str
    name: str
    unit_amount_cents: int
    pricing: ExtraPricing
    unit_limit: int

    model_config = ConfigDict(from_attributes=True)
