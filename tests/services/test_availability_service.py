"""Tests for pitch resolution and sold-out lookups."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from campground.core.dates import DateRange
from campground.db.session import get_sessionmaker
from campground.models import BlockKind, PaymentStatus, Pitch
from campground.services import availability_service, block_service, reservation_service
from campground.services.availability_service import NO_AVAILABILITY_MESSAGE, NoAvailability
from campground.services.reservation_service import GuestSnapshot

pytestmark = pytest.mark.asyncio

GUEST = GuestSnapshot(
    full_name="Ana Ruiz", dni="12345678z", phone="600000000", license_plate="1234abc"
)


def _range(start_day: int, end_day: int) -> DateRange:
    return DateRange(date(2025, 8, start_day), date(2025, 8, end_day))


async def _book(session, date_range: DateRange, *, status=PaymentStatus.PAID, now=None):
    return await reservation_service.create_reservation(
        session,
        user_id="guest-1",
        date_range=date_range,
        guest=GUEST,
        payment_status=status,
        now=now,
    )


async def test_lowest_free_pitch_is_chosen(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    async with get_sessionmaker(db_url)() as session:
        first = await availability_service.assign_pitch(session, _range(1, 4))
        assert first == pitch_ids[0]
        again = await availability_service.assign_pitch(session, _range(1, 4))
        assert again == first

        booked = await _book(session, _range(1, 4))
        assert booked.pitch_id == pitch_ids[0]
        assert await availability_service.assign_pitch(session, _range(2, 3)) == pitch_ids[1]


async def test_adjacent_stays_share_a_pitch(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    async with get_sessionmaker(db_url)() as session:
        await _book(session, _range(1, 4))
        follow_up = await _book(session, _range(4, 6))
    assert follow_up.pitch_id == pitch_ids[0]


async def test_blocks_and_inactive_pitches_are_skipped(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    async with get_sessionmaker(db_url)() as session:
        await block_service.create_block(
            session,
            pitch_id=pitch_ids[0],
            date_range=_range(1, 10),
            kind=BlockKind.OCCUPIED,
        )
        pitch = await session.get(Pitch, pitch_ids[1])
        pitch.is_active = False
        await session.commit()

        assert await availability_service.assign_pitch(session, _range(3, 5)) == pitch_ids[2]
        assert await availability_service.assign_pitch(session, _range(10, 12)) == pitch_ids[0]


async def test_full_campground_returns_no_availability(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        for _ in campground["pitch_ids"]:
            await _book(session, _range(1, 3))
        outcome = await _book(session, _range(2, 4))
    assert isinstance(outcome, NoAvailability)
    assert outcome.message == NO_AVAILABILITY_MESSAGE


async def test_no_active_pitches(reset_database, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        outcome = await availability_service.assign_pitch(session, _range(1, 2))
    assert isinstance(outcome, NoAvailability)


async def test_past_ranges_are_accepted(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        outcome = await availability_service.assign_pitch(
            session, DateRange(date(2001, 1, 1), date(2001, 1, 2))
        )
    assert outcome == campground["pitch_ids"][0]


async def test_pending_hold_expires(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    created = datetime(2025, 7, 20, 10, 0, tzinfo=UTC)
    async with get_sessionmaker(db_url)() as session:
        held = await _book(session, _range(1, 3), status=PaymentStatus.PENDING, now=created)
        assert held.pitch_id == pitch_ids[0]

        within_hold = created + timedelta(minutes=10)
        assert (
            await availability_service.assign_pitch(session, _range(1, 3), now=within_hold)
            == pitch_ids[1]
        )
        after_hold = created + timedelta(minutes=31)
        assert (
            await availability_service.assign_pitch(session, _range(1, 3), now=after_hold)
            == pitch_ids[0]
        )


async def test_refunded_stays_release_their_pitch(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    async with get_sessionmaker(db_url)() as session:
        booked = await _book(session, _range(1, 3))
        await reservation_service.mark_refunded(session, booked.id)
        assert await availability_service.assign_pitch(session, _range(1, 3)) == pitch_ids[0]


async def test_pitch_is_free(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    async with get_sessionmaker(db_url)() as session:
        booked = await _book(session, _range(1, 3))
        assert not await availability_service.pitch_is_free(session, pitch_ids[0], _range(2, 4))
        assert await availability_service.pitch_is_free(
            session, pitch_ids[0], _range(2, 4), exclude_reservation_id=booked.id
        )
        assert not await availability_service.pitch_is_free(session, 999, _range(2, 4))


async def test_sold_out_dates(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        for _ in campground["pitch_ids"]:
            await _book(session, _range(5, 7))
        sold_out = await availability_service.sold_out_dates(
            session, from_date=date(2025, 8, 4), to_date=date(2025, 8, 8)
        )
        assert sold_out == [date(2025, 8, 5), date(2025, 8, 6)]

        with pytest.raises(ValueError):
            await availability_service.sold_out_dates(
                session, from_date=date(2025, 8, 8), to_date=date(2025, 8, 4)
            )
