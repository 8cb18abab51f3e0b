"""Pitch schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from campground.services.pitch_service import PitchStatus


class PitchRead(BaseModel):
    id: int
    name: str
    is_active: bool
    status: PitchStatus

    model_config = ConfigDict(from_attributes=True)


class PitchUpdate(BaseModel):
    is_active: bool
