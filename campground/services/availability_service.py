"""Pitch availability resolution and the assignment critical section."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator, Awaitable, Callable, Collection
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import TypeVar

from sqlalchemy import and_, or_, select, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.dates import DateRange
from campground.core.settings import get_assignment_settings
from campground.models.block import Block
from campground.models.pitch import Pitch
from campground.models.reservation import PaymentStatus, Reservation

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_AVAILABILITY_MESSAGE = "No pitches available for these dates, please choose others"

# pg_advisory_xact_lock key shared by every process assigning pitches.
_ASSIGNMENT_LOCK_KEY = 48_151_623

_RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03", "23P01"}

_HOLD_STATUSES = (PaymentStatus.PENDING, PaymentStatus.UNPAID)

_loop_locks: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, asyncio.Lock
] = weakref.WeakKeyDictionary()


class AssignmentConflictError(RuntimeError):
    """The assignment could not be committed after bounded retries."""

    def __init__(self, message: str = "Pitch assignment is busy, please try again") -> None:
        super().__init__(message)


class AssignmentBusyError(AssignmentConflictError):
    """The assignment lock could not be acquired in time."""


class PitchUnavailableError(ValueError):
    """A specific pitch cannot take the requested range."""


@dataclass(frozen=True, slots=True)
class NoAvailability:
    """Typed outcome for a range with no free pitch."""

    date_range: DateRange
    message: str = NO_AVAILABILITY_MESSAGE


def _assignment_lock() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _loop_locks.get(loop)
    if lock is None:
        lock = asyncio.Lock()
        _loop_locks[loop] = lock
    return lock


def _is_retryable(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    return "database is locked" in str(orig or exc).lower()


@asynccontextmanager
async def _critical_section(session: AsyncSession, timeout: float) -> AsyncIterator[None]:
    lock = _assignment_lock()
    try:
        await asyncio.wait_for(lock.acquire(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise AssignmentBusyError() from exc
    try:
        bind = session.get_bind()
        if bind.dialect.name == "postgresql":
            await session.execute(
                text(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'")
            )
            await session.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": _ASSIGNMENT_LOCK_KEY},
            )
        yield
    finally:
        lock.release()


async def run_assignment(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
) -> T:
    """Run ``operation`` and commit while holding the assignment lock.

    The operation must read its candidates and write its rows through
    ``session``; the commit happens before the lock is released so no other
    caller can observe the same free pitch. Transient database conflicts are
    retried with exponential backoff and finally surface as
    :class:`AssignmentConflictError`.
    """
    config = get_assignment_settings()
    for attempt in range(1, config.max_attempts + 1):
        try:
            async with _critical_section(session, config.lock_timeout_seconds):
                try:
                    result = await operation()
                    await session.commit()
                except BaseException:
                    await session.rollback()
                    raise
            return result
        except AssignmentBusyError:
            if attempt == config.max_attempts:
                raise
            logger.warning("Assignment lock busy (attempt %s)", attempt)
        except DBAPIError as exc:
            # Lock statements fail outside the operation; PostgreSQL keeps the
            # transaction aborted until it is rolled back.
            await session.rollback()
            if not _is_retryable(exc):
                raise
            if attempt == config.max_attempts:
                raise AssignmentConflictError() from exc
            logger.warning("Retrying pitch assignment after conflict (attempt %s): %s", attempt, exc.orig)
        await asyncio.sleep(config.retry_backoff_seconds * (2 ** (attempt - 1)))
    raise AssignmentConflictError()


def holding_clause(now: datetime | None = None):
    """SQL filter for reservations that keep their pitch exclusive.

    Paid stays always hold; pending and unpaid checkouts hold until the
    pending hold window has elapsed since creation.
    """
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(minutes=get_assignment_settings().pending_hold_minutes)
    return or_(
        Reservation.payment_status == PaymentStatus.PAID,
        and_(
            Reservation.payment_status.in_(_HOLD_STATUSES),
            Reservation.created_at >= cutoff,
        ),
    )


async def _blocked_pitch_ids(
    session: AsyncSession,
    date_range: DateRange,
    *,
    pitch_id: int | None = None,
    exclude_reservation_id: int | None = None,
    now: datetime | None = None,
) -> set[int]:
    reservation_stmt = select(Reservation.pitch_id).where(
        Reservation.pitch_id.is_not(None),
        Reservation.start_date < date_range.end,
        Reservation.end_date > date_range.start,
        holding_clause(now),
    )
    block_stmt = select(Block.pitch_id).where(
        Block.start_date < date_range.end,
        Block.end_date > date_range.start,
    )
    if pitch_id is not None:
        reservation_stmt = reservation_stmt.where(Reservation.pitch_id == pitch_id)
        block_stmt = block_stmt.where(Block.pitch_id == pitch_id)
    if exclude_reservation_id is not None:
        reservation_stmt = reservation_stmt.where(Reservation.id != exclude_reservation_id)

    blocked = set((await session.execute(reservation_stmt)).scalars().all())
    blocked.update((await session.execute(block_stmt)).scalars().all())
    return blocked


async def assign_pitch(
    session: AsyncSession,
    date_range: DateRange,
    *,
    exclude_pitch_ids: Collection[int] = (),
    exclude_reservation_id: int | None = None,
    now: datetime | None = None,
) -> int | NoAvailability:
    """Return the lowest-id active pitch free for ``date_range``.

    Callers that persist the result must run inside :func:`run_assignment`.
    """
    blocked = await _blocked_pitch_ids(
        session,
        date_range,
        exclude_reservation_id=exclude_reservation_id,
        now=now,
    )
    excluded = set(exclude_pitch_ids)
    result = await session.execute(
        select(Pitch.id).where(Pitch.is_active.is_(True)).order_by(Pitch.id)
    )
    for candidate in result.scalars():
        if candidate in excluded or candidate in blocked:
            continue
        return candidate
    return NoAvailability(date_range)


async def pitch_is_free(
    session: AsyncSession,
    pitch_id: int,
    date_range: DateRange,
    *,
    exclude_reservation_id: int | None = None,
    now: datetime | None = None,
) -> bool:
    pitch = await session.get(Pitch, pitch_id)
    if pitch is None or not pitch.is_active:
        return False
    blocked = await _blocked_pitch_ids(
        session,
        date_range,
        pitch_id=pitch_id,
        exclude_reservation_id=exclude_reservation_id,
        now=now,
    )
    return pitch_id not in blocked


async def sold_out_dates(
    session: AsyncSession,
    *,
    from_date: date,
    to_date: date,
    now: datetime | None = None,
) -> list[date]:
    """Return the nights in ``[from_date, to_date]`` with no free active pitch."""
    if from_date > to_date:
        raise ValueError("from_date must be on or before to_date")
    window = DateRange(from_date, to_date + timedelta(days=1))

    active_ids = set(
        (
            await session.execute(select(Pitch.id).where(Pitch.is_active.is_(True)))
        ).scalars().all()
    )

    occupied: list[tuple[int, DateRange]] = []
    reservation_rows = await session.execute(
        select(Reservation.pitch_id, Reservation.start_date, Reservation.end_date).where(
            Reservation.pitch_id.is_not(None),
            Reservation.start_date < window.end,
            Reservation.end_date > window.start,
            holding_clause(now),
        )
    )
    occupied.extend((row[0], DateRange(row[1], row[2])) for row in reservation_rows.all())
    block_rows = await session.execute(
        select(Block.pitch_id, Block.start_date, Block.end_date).where(
            Block.start_date < window.end,
            Block.end_date > window.start,
        )
    )
    occupied.extend((row[0], DateRange(row[1], row[2])) for row in block_rows.all())

    sold_out: list[date] = []
    for day in window.days():
        taken = {pitch_id for pitch_id, span in occupied if span.contains(day)}
        if active_ids <= taken:
            sold_out.append(day)
    return sold_out
