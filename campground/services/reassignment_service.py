"""Move paid stays off a pitch that enters maintenance."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.dates import DateRange, coerce_utc
from campground.models.reservation import PaymentStatus, Reservation
from campground.services import availability_service, reservation_service
from campground.services.availability_service import (
    AssignmentConflictError,
    NoAvailability,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReassignmentMove:
    reservation_id: int
    from_pitch_id: int
    to_pitch_id: int


@dataclass(slots=True)
class ReassignmentReport:
    """Outcome of a maintenance reassignment run, for operator follow-up."""

    pitch_id: int
    moves: list[ReassignmentMove] = field(default_factory=list)
    unresolved: list[int] = field(default_factory=list)

    @property
    def reassigned_count(self) -> int:
        return len(self.moves)

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)


async def _move_reservation(
    session: AsyncSession,
    *,
    reservation_id: int,
    blocked_pitch_id: int,
    now: datetime,
) -> int | None | bool:
    """Return the new pitch id, None when no pitch is free, or False when
    the stay is gone or already off the blocked pitch."""

    async def _apply() -> int | None | bool:
        reservation = await session.get(
            Reservation, reservation_id, populate_existing=True
        )
        if reservation is None or reservation.pitch_id != blocked_pitch_id:
            return False
        outcome = await availability_service.assign_pitch(
            session,
            reservation.date_range,
            exclude_pitch_ids={blocked_pitch_id},
            exclude_reservation_id=reservation_id,
            now=now,
        )
        if isinstance(outcome, NoAvailability):
            reservation.needs_attention = True
            await session.flush()
            return None
        reservation.pitch_id = outcome
        reservation.needs_attention = False
        await session.flush()
        return outcome

    return await availability_service.run_assignment(session, _apply)


async def on_maintenance_block_created(
    session: AsyncSession,
    pitch_id: int,
    date_range: DateRange,
    *,
    now: datetime | None = None,
) -> ReassignmentReport:
    """Reassign every paid, not yet finished stay that overlaps the block.

    Each move is its own atomic assignment; stays that cannot be moved keep
    their pitch and are flagged ``needs_attention``.
    """
    now = coerce_utc(now or datetime.now(UTC))
    today = now.date()
    report = ReassignmentReport(pitch_id=pitch_id)

    affected = await reservation_service.list_overlapping(
        session,
        pitch_id=pitch_id,
        date_range=date_range,
        statuses={PaymentStatus.PAID},
    )
    # Plain ids: a failed move rolls back and expires loaded rows.
    pending_moves = [r.id for r in affected if r.end_date > today]
    for reservation_id in pending_moves:
        try:
            new_pitch_id = await _move_reservation(
                session,
                reservation_id=reservation_id,
                blocked_pitch_id=pitch_id,
                now=now,
            )
        except AssignmentConflictError:
            logger.exception("Reassignment of reservation %s aborted", reservation_id)
            new_pitch_id = None
        if new_pitch_id is False:
            continue
        if new_pitch_id is None:
            report.unresolved.append(reservation_id)
            logger.warning(
                "Reservation %s could not leave pitch %s; operator attention required",
                reservation_id,
                pitch_id,
            )
            continue
        report.moves.append(
            ReassignmentMove(
                reservation_id=reservation_id,
                from_pitch_id=pitch_id,
                to_pitch_id=new_pitch_id,
            )
        )
        logger.info(
            "Reservation %s moved from pitch %s to %s for maintenance",
            reservation_id,
            pitch_id,
            new_pitch_id,
        )

    return report
