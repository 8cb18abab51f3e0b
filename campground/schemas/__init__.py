"""Schema exports."""

from campground.schemas.access import AccessPassRead
from campground.schemas.availability import AvailabilityRead, SoldOutDates
from campground.schemas.block import (
    BlockCreate,
    BlockCreated,
    BlockRead,
    ReassignmentReportRead,
)
from campground.schemas.dashboard import DashboardRead
from campground.schemas.extra import ExtraRead
from campground.schemas.payment import PaymentEventIn, PaymentEventResult
from campground.schemas.pitch import PitchRead, PitchUpdate
from campground.schemas.reservation import (
    ExtraSelection,
    GuestDetails,
    MyReservations,
    PitchOverrideRequest,
    ReservationCreate,
    ReservationRead,
    ReservationSummary,
)

__all__ = [
    "AccessPassRead",
    "AvailabilityRead",
    "BlockCreate",
    "BlockCreated",
    "BlockRead",
    "DashboardRead",
    "ExtraRead",
    "ExtraSelection",
    "GuestDetails",
    "MyReservations",
    "PaymentEventIn",
    "PaymentEventResult",
    "PitchOverrideRequest",
    "PitchRead",
    "PitchUpdate",
    "ReassignmentReportRead",
    "ReservationCreate",
    "ReservationRead",
    "ReservationSummary",
    "SoldOutDates",
]
