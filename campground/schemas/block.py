"""Pydantic schemas for pitch blocks."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from campground.core.dates import DateRange
from campground.models.block import BlockKind


class BlockCreate(BaseModel):
    """Payload for declaring a pitch unavailable."""

    pitch_id: int
    start_date: date
    end_date: date
    kind: BlockKind = BlockKind.MAINTENANCE
    reason: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def _check_range(self) -> "BlockCreate":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self

    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class BlockRead(BaseModel):
    id: int
    pitch_id: int
    kind: BlockKind
    start_date: date
    end_date: date
    reason: str | None = None
    created_by: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReassignmentMoveRead(BaseModel):
    reservation_id: int
    from_pitch_id: int
    to_pitch_id: int

    model_config = ConfigDict(from_attributes=True)


class ReassignmentReportRead(BaseModel):
    """Which stays moved off the blocked pitch and which need an operator."""

    pitch_id: int
    reassigned_count: int
    unresolved_count: int
    moves: list[ReassignmentMoveRead]
    unresolved: list[int]

    model_config = ConfigDict(from_attributes=True)


class BlockCreated(BaseModel):
    block: BlockRead
    reassignment: ReassignmentReportRead | None = None
