"""Tests for dashboard aggregation."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from campground.core.dates import DateRange, Period, PeriodKind
from campground.db.session import get_sessionmaker
from campground.models import BlockKind, PaymentStatus, Pitch
from campground.services import block_service, dashboard_service, reservation_service
from campground.services.reservation_service import GuestSnapshot

pytestmark = pytest.mark.asyncio

NOW = datetime(2025, 8, 11, 12, 0, tzinfo=UTC)
GUEST = GuestSnapshot(
    full_name="Pau Vidal", dni="55667788c", phone="633333333", license_plate="5555ccc"
)


async def _book(session, start: date, end: date, *, status=PaymentStatus.PAID, user_id="guest-1", extras=None):
    return await reservation_service.create_reservation(
        session,
        user_id=user_id,
        date_range=DateRange(start, end),
        guest=GUEST,
        extras=extras,
        payment_status=status,
    )


async def _seed(session, campground) -> None:
    pitch_ids = campground["pitch_ids"]
    extra_ids = campground["extra_ids"]
    await _book(
        session,
        date(2025, 8, 10),
        date(2025, 8, 13),
        extras={extra_ids["PERSON"]: 2, extra_ids["POWER"]: 1},
    )
    await _book(session, date(2025, 7, 29), date(2025, 8, 1))
    await _book(session, date(2025, 8, 15), date(2025, 8, 17), status=PaymentStatus.PENDING)
    await _book(
        session,
        date(2025, 8, 20),
        date(2025, 8, 22),
        user_id=campground["operator_id"],
        extras={extra_ids["PET"]: 1},
    )
    await block_service.create_block(
        session,
        pitch_id=pitch_ids[1],
        date_range=DateRange(date(2025, 8, 11), date(2025, 8, 12)),
        kind=BlockKind.MAINTENANCE,
        now=NOW,
    )
    pitch = await session.get(Pitch, pitch_ids[2])
    pitch.is_active = False
    await session.commit()


async def test_month_metrics(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        await _seed(session, campground)
        metrics = await dashboard_service.compute(
            session, Period(PeriodKind.MONTH, date(2025, 8, 11)), now=NOW
        )

    assert metrics.period_start == date(2025, 8, 1)
    assert metrics.period_end == date(2025, 9, 1)
    assert metrics.stays_revenue_cents == 4500
    assert metrics.extras_revenue_cents_by_code == {"PERSON": 3000, "POWER": 900}
    assert metrics.total_revenue_cents == 8400
    assert metrics.check_ins == 1
    assert metrics.check_outs == 2
    assert metrics.pending_count == 1


async def test_live_counts_ignore_the_period(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        await _seed(session, campground)
        metrics = await dashboard_service.compute(
            session, Period(PeriodKind.YEAR, date(2019, 1, 1)), now=NOW
        )

    assert metrics.total_revenue_cents == 0
    assert metrics.occupied_count == 1
    assert metrics.maintenance_count == 1
    assert metrics.free_count == 0
    assert metrics.inactive_count == 1
    assert metrics.occupancy_pct == 50


async def test_day_metrics_count_whole_stays(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        await _seed(session, campground)
        metrics = await dashboard_service.compute(
            session, Period(PeriodKind.DAY, date(2025, 8, 12)), now=NOW
        )

    assert metrics.stays_revenue_cents == 4500
    assert metrics.check_ins == 0
    assert metrics.check_outs == 0
    assert metrics.to_dict()["total_revenue_cents"] == 8400


async def test_empty_campground(reset_database, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        metrics = await dashboard_service.compute(
            session, Period(PeriodKind.WEEK, date(2025, 8, 11)), now=NOW
        )
    assert metrics.occupancy_pct == 0
    assert metrics.total_revenue_cents == 0
    assert metrics.extras_revenue_cents_by_code == {}
