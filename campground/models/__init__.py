"""ORM models package export."""

from campground.models.block import Block, BlockKind
from campground.models.extra import Extra, ExtraPricing, ReservationExtra
from campground.models.owner import Owner
from campground.models.payment import PaymentEvent
from campground.models.pitch import Pitch
from campground.models.reservation import PaymentStatus, Reservation

__all__ = [
    "Block",
    "BlockKind",
    "Extra",
    "ExtraPricing",
    "Owner",
    "PaymentEvent",
    "PaymentStatus",
    "Pitch",
    "Reservation",
    "ReservationExtra",
]
