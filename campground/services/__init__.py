"""Service layer exports."""
from campground.services import (
    access_service,
    availability_service,
    block_service,
    dashboard_service,
    payments_service,
    pitch_service,
    pricing_service,
    reassignment_service,
    reservation_service,
)

__all__ = [
    "access_service",
    "availability_service",
    "block_service",
    "dashboard_service",
    "payments_service",
    "pitch_service",
    "pricing_service",
    "reassignment_service",
    "reservation_service",
]
