"""Versioned API router."""

from fastapi import APIRouter

from . import (
    availability,
    blocks,
    dashboard,
    extras,
    health,
    payments_webhook,
    pitches,
    reservations,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(
    availability.router, prefix="/availability", tags=["availability"]
)
router.include_router(extras.router, prefix="/extras", tags=["extras"])
router.include_router(
    reservations.router, prefix="/reservations", tags=["reservations"]
)
router.include_router(pitches.router, prefix="/pitches", tags=["pitches"])
router.include_router(blocks.router, prefix="/blocks", tags=["blocks"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(payments_webhook.router)

__all__ = ["router"]
