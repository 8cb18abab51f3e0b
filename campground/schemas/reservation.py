"""Pydantic schemas for reservations."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from campground.core.dates import DateRange
from campground.models.reservation import PaymentStatus


class GuestDetails(BaseModel):
    """Guest data captured at checkout."""

    full_name: str = Field(min_length=1, max_length=160)
    dni: str = Field(min_length=1, max_length=32)
    phone: str = Field(min_length=1, max_length=32)
    license_plate: str = Field(min_length=1, max_length=16)


class ExtraSelection(BaseModel):
    extra_id: int
    quantity: int = Field(ge=0)


class ReservationCreate(BaseModel):
    """Payload for booking a stay."""

    start_date: date
    end_date: date
    guest: GuestDetails
    extras: list[ExtraSelection] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_range(self) -> "ReservationCreate":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self

    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def selections(self) -> dict[int, int]:
        chosen: dict[int, int] = {}
        for item in self.extras:
            chosen[item.extra_id] = chosen.get(item.extra_id, 0) + item.quantity
        return chosen


class ReservationExtraRead(BaseModel):
    extra_id: int
    quantity: int
    unit_amount_cents: int
    line_total_cents: int

    model_config = ConfigDict(from_attributes=True)


class ReservationRead(BaseModel):
    """Serialized reservation representation."""

    id: int
    user_id: str
    pitch_id: int | None = None
    start_date: date
    end_date: date
    nights: int
    payment_status: PaymentStatus
    nightly_amount_cents: int
    total_amount_cents: int
    full_name: str | None = None
    dni: str | None = None
    phone: str | None = None
    license_plate: str | None = None
    access_expires_at: datetime | None = None
    needs_attention: bool = False
    created_at: datetime
    extras: list[ReservationExtraRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ReservationSummary(BaseModel):
    """Row in the operator reservation list."""

    id: int
    pitch_id: int | None = None
    start_date: date
    end_date: date
    payment_status: PaymentStatus
    total_amount_cents: int
    full_name: str | None = None
    needs_attention: bool = False

    model_config = ConfigDict(from_attributes=True)


class MyReservations(BaseModel):
    """A guest's stays grouped for the pass screen."""

    default_reservation_id: int | None = None
    active: list[ReservationRead] = Field(default_factory=list)
    upcoming: list[ReservationRead] = Field(default_factory=list)
    past: list[ReservationRead] = Field(default_factory=list)


class PitchOverrideRequest(BaseModel):
    pitch_id: int
