"""Reservation management service helpers."""
from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sqlalchemy import String, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campground.core.dates import DateRange
from campground.models.extra import ReservationExtra
from campground.models.owner import Owner
from campground.models.reservation import PaymentStatus, Reservation
from campground.services import availability_service, pricing_service
from campground.services.availability_service import NoAvailability, PitchUnavailableError

logger = logging.getLogger(__name__)

_ALLOWED_STATUS_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.UNPAID: {PaymentStatus.PENDING, PaymentStatus.PAID},
    PaymentStatus.PENDING: {PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}


class InvalidStatusTransitionError(ValueError):
    """Raised for payment status changes the lifecycle does not allow."""


@dataclass(frozen=True, slots=True)
class GuestSnapshot:
    """Personal data copied onto the reservation at checkout."""

    full_name: str
    dni: str
    phone: str
    license_plate: str

    def normalized(self) -> GuestSnapshot:
        return GuestSnapshot(
            full_name=self.full_name.strip(),
            dni=self.dni.strip().upper(),
            phone=self.phone.strip(),
            license_plate=self.license_plate.strip().upper(),
        )


def _detail_query():
    return select(Reservation).options(
        selectinload(Reservation.extras).selectinload(ReservationExtra.extra)
    )


def _not_owner_clause():
    return Reservation.user_id.not_in(select(Owner.user_id))


async def get_reservation(
    session: AsyncSession,
    reservation_id: int,
) -> Reservation | None:
    """Fetch a reservation with its extra lines."""
    stmt = (
        _detail_query()
        .where(Reservation.id == reservation_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


async def list_user_reservations(
    session: AsyncSession,
    *,
    user_id: str,
) -> Sequence[Reservation]:
    stmt = (
        _detail_query()
        .where(Reservation.user_id == user_id)
        .order_by(Reservation.start_date.asc(), Reservation.id.asc())
    )
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def list_overlapping(
    session: AsyncSession,
    *,
    pitch_id: int | None,
    date_range: DateRange,
    statuses: Collection[PaymentStatus],
    exclude_owners: bool = False,
) -> list[Reservation]:
    """Reservations in ``statuses`` sharing a night with ``date_range``.

    ``pitch_id=None`` scans every pitch, including unassigned reservations.
    """
    stmt = _detail_query().where(
        Reservation.payment_status.in_(list(statuses)),
        Reservation.start_date < date_range.end,
        Reservation.end_date > date_range.start,
    )
    if pitch_id is not None:
        stmt = stmt.where(Reservation.pitch_id == pitch_id)
    if exclude_owners:
        stmt = stmt.where(_not_owner_clause())
    result = await session.execute(stmt.order_by(Reservation.start_date, Reservation.id))
    return list(result.scalars().unique().all())


async def search_reservations(
    session: AsyncSession,
    *,
    status: PaymentStatus | None = None,
    reservation_id_fragment: str | None = None,
    name: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Reservation]:
    """Operator search over guest reservations, newest stays first."""
    stmt = select(Reservation).where(_not_owner_clause())
    if status is not None:
        stmt = stmt.where(Reservation.payment_status == status)
    if reservation_id_fragment and reservation_id_fragment.strip():
        stmt = stmt.where(
            cast(Reservation.id, String).like(f"%{reservation_id_fragment.strip()}%")
        )
    if name and name.strip():
        stmt = stmt.where(
            func.lower(Reservation.full_name).like(f"%{name.strip().lower()}%")
        )
    if date_from is not None:
        stmt = stmt.where(Reservation.end_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Reservation.start_date <= date_to)
    stmt = (
        stmt.order_by(Reservation.start_date.desc(), Reservation.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def create_reservation(
    session: AsyncSession,
    *,
    user_id: str,
    date_range: DateRange,
    guest: GuestSnapshot,
    extras: Mapping[int, int] | None = None,
    nightly_amount_cents: int | None = None,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
    assign: bool = True,
    now: datetime | None = None,
) -> Reservation | NoAvailability:
    """Price the stay, resolve a pitch and persist the reservation atomically.

    With ``assign=False`` the reservation is stored without a pitch for later
    manual assignment.
    """
    quote = await pricing_service.quote_stay(
        session,
        nights=date_range.nights,
        selections=extras or {},
        nightly_amount_cents=nightly_amount_cents,
    )
    snapshot = guest.normalized()

    async def _persist() -> Reservation | NoAvailability:
        pitch_id: int | None = None
        if assign:
            outcome = await availability_service.assign_pitch(
                session, date_range, now=now
            )
            if isinstance(outcome, NoAvailability):
                return outcome
            pitch_id = outcome

        reservation = Reservation(
            user_id=user_id,
            pitch_id=pitch_id,
            start_date=date_range.start,
            end_date=date_range.end,
            payment_status=payment_status,
            nightly_amount_cents=quote.nightly_amount_cents,
            total_amount_cents=quote.total_cents,
            full_name=snapshot.full_name,
            dni=snapshot.dni,
            phone=snapshot.phone,
            license_plate=snapshot.license_plate,
            needs_attention=False,
        )
        if now is not None:
            reservation.created_at = now
        reservation.extras = [
            ReservationExtra(
                extra_id=line.extra_id,
                quantity=line.quantity,
                unit_amount_cents=line.unit_amount_cents,
                line_total_cents=line.line_total_cents,
            )
            for line in quote.items
        ]
        session.add(reservation)
        await session.flush()
        return reservation

    outcome = await availability_service.run_assignment(session, _persist)
    if isinstance(outcome, NoAvailability):
        logger.info(
            "No pitch available for %s -> %s",
            date_range.start.isoformat(),
            date_range.end.isoformat(),
        )
        return outcome
    logger.info("Reservation %s assigned to pitch %s", outcome.id, outcome.pitch_id)
    return await get_reservation(session, outcome.id) or outcome


def _validate_status_transition(current: PaymentStatus, target: PaymentStatus) -> None:
    if target == current:
        return
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransitionError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def _secure_pitch_for_payment(
    session: AsyncSession,
    reservation: Reservation,
    now: datetime,
) -> None:
    """Keep the paid invariant when a hold lapsed before the payment landed."""
    if reservation.pitch_id is not None and await availability_service.pitch_is_free(
        session,
        reservation.pitch_id,
        reservation.date_range,
        exclude_reservation_id=reservation.id,
        now=now,
    ):
        return
    outcome = await availability_service.assign_pitch(
        session,
        reservation.date_range,
        exclude_reservation_id=reservation.id,
        now=now,
    )
    if isinstance(outcome, NoAvailability):
        reservation.needs_attention = True
        if reservation.pitch_id is not None:
            logger.warning(
                "Reservation %s paid but pitch %s is taken; unassigning",
                reservation.id,
                reservation.pitch_id,
            )
        reservation.pitch_id = None
        return
    if reservation.pitch_id != outcome:
        logger.info(
            "Reservation %s moved from pitch %s to %s on payment",
            reservation.id,
            reservation.pitch_id,
            outcome,
        )
    reservation.pitch_id = outcome


async def transition_payment_status(
    session: AsyncSession,
    *,
    reservation_id: int,
    target: PaymentStatus,
    now: datetime | None = None,
) -> Reservation | None:
    """Apply a payment status change, returning None for unknown reservations."""
    now = now or datetime.now(UTC)

    async def _apply() -> Reservation | None:
        reservation = await session.get(Reservation, reservation_id, populate_existing=True)
        if reservation is None:
            return None
        _validate_status_transition(reservation.payment_status, target)
        if target == reservation.payment_status:
            return reservation
        if target is PaymentStatus.PAID:
            await _secure_pitch_for_payment(session, reservation, now)
        reservation.payment_status = target
        await session.flush()
        return reservation

    if target is PaymentStatus.PAID:
        updated = await availability_service.run_assignment(session, _apply)
    else:
        try:
            updated = await _apply()
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
    if updated is None:
        return None
    return await get_reservation(session, updated.id)


async def mark_paid(
    session: AsyncSession, reservation_id: int, *, now: datetime | None = None
) -> Reservation | None:
    return await transition_payment_status(
        session, reservation_id=reservation_id, target=PaymentStatus.PAID, now=now
    )


async def mark_refunded(
    session: AsyncSession, reservation_id: int
) -> Reservation | None:
    return await transition_payment_status(
        session, reservation_id=reservation_id, target=PaymentStatus.REFUNDED
    )


async def override_pitch(
    session: AsyncSession,
    *,
    reservation_id: int,
    pitch_id: int,
    now: datetime | None = None,
) -> Reservation | None:
    """Bind a reservation to an operator-chosen pitch if it is free."""

    async def _apply() -> Reservation | None:
        reservation = await session.get(Reservation, reservation_id, populate_existing=True)
        if reservation is None:
            return None
        if not await availability_service.pitch_is_free(
            session,
            pitch_id,
            reservation.date_range,
            exclude_reservation_id=reservation.id,
            now=now,
        ):
            raise PitchUnavailableError(
                f"Pitch {pitch_id} is not available for these dates"
            )
        reservation.pitch_id = pitch_id
        reservation.needs_attention = False
        await session.flush()
        return reservation

    updated = await availability_service.run_assignment(session, _apply)
    if updated is None:
        return None
    logger.info("Reservation %s manually assigned to pitch %s", reservation_id, pitch_id)
    return await get_reservation(session, updated.id)
