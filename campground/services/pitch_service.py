"""Pitch registry and live status derivation."""

from __future__ import annotations

import enum
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.dates import DateRange, coerce_utc
from campground.models.block import BlockKind
from campground.models.pitch import Pitch
from campground.models.reservation import PaymentStatus
from campground.services import block_service, reservation_service


class PitchStatus(str, enum.Enum):
    """Status of a pitch at a given instant."""

    FREE = "free"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


async def list_pitches(session: AsyncSession) -> list[Pitch]:
    result = await session.execute(select(Pitch).order_by(Pitch.id))
    return list(result.scalars().all())


async def get_pitch(session: AsyncSession, pitch_id: int) -> Pitch | None:
    return await session.get(Pitch, pitch_id)


async def set_pitch_active(
    session: AsyncSession,
    *,
    pitch: Pitch,
    is_active: bool,
) -> Pitch:
    """Activate or retire a pitch; retired pitches are skipped by the resolver."""
    pitch.is_active = is_active
    await session.commit()
    await session.refresh(pitch)
    return pitch


async def live_statuses(
    session: AsyncSession,
    *,
    at: datetime | None = None,
) -> dict[int, PitchStatus]:
    """Derive each pitch's status for the night containing ``at``.

    Maintenance wins over occupancy; a pitch is occupied by an occupied block
    or a paid reservation covering that night.
    """
    day = coerce_utc(at or datetime.now(UTC)).date()
    night = DateRange.single_day(day)

    maintenance: set[int] = set()
    occupied: set[int] = set()
    for block in await block_service.active_blocks_for(session, day):
        if block.kind is BlockKind.MAINTENANCE:
            maintenance.add(block.pitch_id)
        else:
            occupied.add(block.pitch_id)

    paid = await reservation_service.list_overlapping(
        session,
        pitch_id=None,
        date_range=night,
        statuses={PaymentStatus.PAID},
    )
    occupied.update(r.pitch_id for r in paid if r.pitch_id is not None)

    statuses: dict[int, PitchStatus] = {}
    for pitch in await list_pitches(session):
        if not pitch.is_active:
            statuses[pitch.id] = PitchStatus.INACTIVE
        elif pitch.id in maintenance:
            statuses[pitch.id] = PitchStatus.MAINTENANCE
        elif pitch.id in occupied:
            statuses[pitch.id] = PitchStatus.OCCUPIED
        else:
            statuses[pitch.id] = PitchStatus.FREE
    return statuses
