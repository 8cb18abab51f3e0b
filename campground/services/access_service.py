"""Rotating QR access passes for paid stays."""

from __future__ import annotations

import secrets
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.config import get_settings
from campground.core.dates import coerce_utc, end_of_day, start_of_day
from campground.core.security import decode_access_pass, encode_access_pass
from campground.models.reservation import PaymentStatus, Reservation

RESERVATION_NOT_FOUND = "Reservation not found"
PAYMENT_NOT_COMPLETED = "Payment is not completed for this reservation"
PASS_EXPIRED = "This pass is no longer available"


@dataclass(frozen=True, slots=True)
class AccessToken:
    """A short-lived signed pass to embed in the QR payload."""

    reservation_id: int
    pass_value: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class Denied:
    """Why a pass cannot be shown right now."""

    reason: str


@dataclass(slots=True)
class ReservationBuckets:
    active: list[Reservation] = field(default_factory=list)
    upcoming: list[Reservation] = field(default_factory=list)
    past: list[Reservation] = field(default_factory=list)


def access_window(reservation: Reservation) -> tuple[datetime, datetime]:
    """Return ``(opens_at, closes_at)`` for a reservation's pass.

    The window opens a configurable lead time before the first night and
    closes at the explicit override, or at the end of the checkout day.
    """
    lead = timedelta(minutes=get_settings().access_window_lead_minutes)
    opens_at = start_of_day(reservation.start_date) - lead
    if reservation.access_expires_at is not None:
        closes_at = coerce_utc(reservation.access_expires_at)
    else:
        closes_at = end_of_day(reservation.end_date)
    return opens_at, closes_at


def check_access(reservation: Reservation | None, now: datetime) -> Denied | None:
    """Return the first failing precondition, or None when a pass may be issued."""
    if reservation is None:
        return Denied(RESERVATION_NOT_FOUND)
    if reservation.payment_status is not PaymentStatus.PAID:
        return Denied(PAYMENT_NOT_COMPLETED)
    opens_at, closes_at = access_window(reservation)
    if now < opens_at:
        return Denied(
            f"The pass will be available from {opens_at.strftime('%d/%m/%Y %H:%M')}"
        )
    if now > closes_at:
        return Denied(PASS_EXPIRED)
    return None


async def issue(
    session: AsyncSession,
    reservation_id: int,
    *,
    now: datetime | None = None,
) -> AccessToken | Denied:
    """Mint a fresh pass; callers re-issue on a fixed cadence."""
    now = coerce_utc(now or datetime.now(UTC))
    reservation = await session.get(Reservation, reservation_id)
    denied = check_access(reservation, now)
    if denied is not None:
        return denied

    expires_at = now + timedelta(seconds=get_settings().access_pass_ttl_seconds)
    pass_value = encode_access_pass(
        {
            "sub": str(reservation_id),
            "iat": now,
            "exp": expires_at,
            "jti": secrets.token_urlsafe(12),
        }
    )
    return AccessToken(
        reservation_id=reservation_id,
        pass_value=pass_value,
        issued_at=now,
        expires_at=expires_at,
    )


def decode_pass(pass_value: str) -> int:
    """Return the reservation id bound to a valid pass; raises JWTError otherwise."""
    claims = decode_access_pass(pass_value)
    return int(claims["sub"])


def _stay_bounds(reservation: Reservation) -> tuple[datetime, datetime]:
    return start_of_day(reservation.start_date), end_of_day(reservation.end_date)


def categorize_reservations(
    reservations: Iterable[Reservation],
    now: datetime,
) -> ReservationBuckets:
    """Split a guest's reservations the way the pass screen lists them.

    Active stays are paid and under way; anything not yet finished is
    upcoming; finished stays are past, newest first.
    """
    now = coerce_utc(now)
    buckets = ReservationBuckets()
    for reservation in reservations:
        starts_at, ends_at = _stay_bounds(reservation)
        if ends_at < now:
            buckets.past.append(reservation)
        elif starts_at < now and reservation.payment_status is PaymentStatus.PAID:
            buckets.active.append(reservation)
        else:
            buckets.upcoming.append(reservation)
    buckets.active.sort(key=lambda r: (r.start_date, r.id))
    buckets.upcoming.sort(key=lambda r: (r.start_date, r.id))
    buckets.past.sort(key=lambda r: (r.start_date, r.id), reverse=True)
    return buckets


def default_reservation(
    reservations: Iterable[Reservation],
    now: datetime,
) -> Reservation | None:
    """Pick the stay under way, else the next one, else the latest finished one."""
    now = coerce_utc(now)
    ordered = sorted(reservations, key=lambda r: (r.start_date, r.id))
    if not ordered:
        return None
    for reservation in ordered:
        starts_at, ends_at = _stay_bounds(reservation)
        if starts_at < now < ends_at:
            return reservation
    for reservation in ordered:
        if _stay_bounds(reservation)[0] > now:
            return reservation
    for reservation in reversed(ordered):
        if _stay_bounds(reservation)[1] < now:
            return reservation
    return ordered[0]
