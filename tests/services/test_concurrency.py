"""Concurrent bookings, lock contention and retries in pitch assignment."""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import date
from itertools import combinations
from types import SimpleNamespace
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError

from campground.core.config import get_settings
from campground.core.dates import DateRange
from campground.db.session import get_sessionmaker
from campground.models import PaymentStatus, Reservation
from campground.services import availability_service, reservation_service
from campground.services.availability_service import (
    AssignmentBusyError,
    AssignmentConflictError,
    NoAvailability,
)
from campground.services.reservation_service import GuestSnapshot

pytestmark = pytest.mark.asyncio


async def _book_in_own_session(db_url: str, index: int, date_range: DateRange):
    async with get_sessionmaker(db_url)() as session:
        return await reservation_service.create_reservation(
            session,
            user_id=f"guest-{index}",
            date_range=date_range,
            guest=GuestSnapshot(
                full_name=f"Guest {index}",
                dni=f"{index:08d}A",
                phone="600000000",
                license_plate=f"{index:04d}XYZ",
            ),
            payment_status=PaymentStatus.PAID,
        )


async def test_parallel_bookings_fill_each_pitch_once(campground, db_url: str) -> None:
    date_range = DateRange(date(2025, 8, 10), date(2025, 8, 13))
    attempts = 10

    outcomes = await asyncio.gather(
        *(_book_in_own_session(db_url, index, date_range) for index in range(attempts))
    )

    booked = [outcome for outcome in outcomes if not isinstance(outcome, NoAvailability)]
    refused = [outcome for outcome in outcomes if isinstance(outcome, NoAvailability)]
    assert len(booked) == len(campground["pitch_ids"])
    assert len(refused) == attempts - len(booked)
    assert sorted(r.pitch_id for r in booked) == campground["pitch_ids"]


async def test_parallel_overlapping_ranges_keep_invariant(campground, db_url: str) -> None:
    ranges = [
        DateRange(date(2025, 8, day), date(2025, 8, day + 3)) for day in range(1, 13)
    ]

    await asyncio.gather(
        *(_book_in_own_session(db_url, index, span) for index, span in enumerate(ranges))
    )

    async with get_sessionmaker(db_url)() as session:
        result = await session.execute(
            select(Reservation).where(Reservation.payment_status == PaymentStatus.PAID)
        )
        paid = list(result.scalars().all())

    assert paid
    for first, second in combinations(paid, 2):
        if first.pitch_id is None or first.pitch_id != second.pitch_id:
            continue
        assert not first.date_range.overlaps(second.date_range)


class _PgError(Exception):
    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class _AbortingPostgresSession:
    """Mimics PostgreSQL: after an error the transaction stays aborted until rollback."""

    def __init__(self, *, lock_failures: int) -> None:
        self.calls: list[str] = []
        self.aborted = False
        self.lock_failures = lock_failures

    def get_bind(self) -> SimpleNamespace:
        return SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))

    async def execute(self, statement: Any, params: Any = None) -> None:
        sql = str(statement)
        self.calls.append(sql)
        if self.aborted:
            raise DBAPIError(sql, params, _PgError("current transaction is aborted", "25P02"))
        if "pg_advisory_xact_lock" in sql and self.lock_failures:
            self.lock_failures -= 1
            self.aborted = True
            raise DBAPIError(sql, params, _PgError("lock timeout", "55P03"))

    async def commit(self) -> None:
        self.calls.append("COMMIT")

    async def rollback(self) -> None:
        self.calls.append("ROLLBACK")
        self.aborted = False


@pytest.fixture()
def short_lock_timeout(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ASSIGNMENT_LOCK_TIMEOUT_SECONDS", "0.05")
    get_settings.cache_clear()
    yield
    monkeypatch.undo()
    get_settings.cache_clear()


async def test_lock_timeout_rolls_back_before_retrying() -> None:
    session = _AbortingPostgresSession(lock_failures=1)

    async def _operation() -> int:
        session.calls.append("OPERATION")
        return 7

    result = await availability_service.run_assignment(session, _operation)

    assert result == 7
    lock_calls = [i for i, call in enumerate(session.calls) if "pg_advisory_xact_lock" in call]
    assert len(lock_calls) == 2
    assert "ROLLBACK" in session.calls[lock_calls[0] : lock_calls[1]]
    assert session.calls[-2:] == ["OPERATION", "COMMIT"]


async def test_persistent_lock_timeout_surfaces_as_conflict() -> None:
    attempts = get_settings().assignment_max_attempts
    session = _AbortingPostgresSession(lock_failures=attempts)

    async def _operation() -> int:
        raise AssertionError("operation must not run without the lock")

    with pytest.raises(AssignmentConflictError):
        await availability_service.run_assignment(session, _operation)
    assert session.calls.count("ROLLBACK") == attempts


async def test_locked_database_is_retried_then_reported(campground, db_url: str) -> None:
    calls = 0

    async def _always_locked() -> None:
        nonlocal calls
        calls += 1
        raise OperationalError(
            "INSERT INTO reservations", {}, sqlite3.OperationalError("database is locked")
        )

    async with get_sessionmaker(db_url)() as session:
        with pytest.raises(AssignmentConflictError) as excinfo:
            await availability_service.run_assignment(session, _always_locked)

    assert not isinstance(excinfo.value, AssignmentBusyError)
    assert calls == get_settings().assignment_max_attempts


async def test_unavailable_lock_raises_busy(short_lock_timeout) -> None:
    session = _AbortingPostgresSession(lock_failures=0)
    ran = False

    async def _operation() -> None:
        nonlocal ran
        ran = True

    lock = availability_service._assignment_lock()
    await lock.acquire()
    try:
        with pytest.raises(AssignmentBusyError):
            await availability_service.run_assignment(session, _operation)
    finally:
        lock.release()

    assert not ran
    assert session.calls == []


@pytest.mark.parametrize("error", [AssignmentConflictError, AssignmentBusyError])
async def test_booking_route_reports_busy_assignment(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch, error
) -> None:
    async def _busy(*args: Any, **kwargs: Any):
        raise error()

    monkeypatch.setattr(reservation_service, "create_reservation", _busy)
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/reservations",
        json={
            "start_date": "2030-07-01",
            "end_date": "2030-07-03",
            "guest": {
                "full_name": "Ana Ruiz",
                "dni": "12345678z",
                "phone": "600000000",
                "license_plate": "1234abc",
            },
            "extras": [],
        },
        headers=app_context["guest_headers"],
    )

    assert response.status_code == 503
    assert "try again" in response.json()["detail"]
