"""Tests for payment status transitions and webhook events."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest
from sqlalchemy import func, select

from campground.core.dates import DateRange
from campground.db.session import get_sessionmaker
from campground.models import PaymentEvent, PaymentStatus
from campground.services import payments_service, reservation_service
from campground.services.reservation_service import GuestSnapshot, InvalidStatusTransitionError

pytestmark = pytest.mark.asyncio

GUEST = GuestSnapshot(
    full_name="Marta Soler", dni="11223344b", phone="622222222", license_plate="4321bcd"
)
STAY = DateRange(date(2025, 9, 1), date(2025, 9, 4))


async def _book(session, *, status=PaymentStatus.PENDING, now=None, user_id="guest-1"):
    return await reservation_service.create_reservation(
        session,
        user_id=user_id,
        date_range=STAY,
        guest=GUEST,
        payment_status=status,
        now=now,
    )


async def test_lifecycle_transitions(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        reservation = await _book(session, status=PaymentStatus.UNPAID)
        original_pitch_id = reservation.pitch_id
        pending = await reservation_service.transition_payment_status(
            session, reservation_id=reservation.id, target=PaymentStatus.PENDING
        )
        assert pending.payment_status is PaymentStatus.PENDING

        paid = await reservation_service.mark_paid(session, reservation.id)
        assert paid.payment_status is PaymentStatus.PAID
        assert paid.pitch_id == original_pitch_id

        refunded = await reservation_service.mark_refunded(session, reservation.id)
        assert refunded.payment_status is PaymentStatus.REFUNDED

        with pytest.raises(InvalidStatusTransitionError):
            await reservation_service.mark_paid(session, reservation.id)


async def test_unpaid_can_skip_pending(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        reservation = await _book(session, status=PaymentStatus.UNPAID)
        paid = await reservation_service.mark_paid(session, reservation.id)
    assert paid.payment_status is PaymentStatus.PAID


async def test_pending_cannot_be_refunded(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        reservation = await _book(session)
        with pytest.raises(InvalidStatusTransitionError):
            await reservation_service.mark_refunded(session, reservation.id)


async def test_unknown_reservation_returns_none(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        assert await reservation_service.mark_paid(session, 4242) is None


async def test_late_payment_moves_to_a_free_pitch(campground, db_url: str) -> None:
    pitch_ids = campground["pitch_ids"]
    created = datetime(2025, 8, 1, 10, 0, tzinfo=UTC)
    later = created + timedelta(hours=2)
    async with get_sessionmaker(db_url)() as session:
        lapsed = await _book(session, now=created)
        assert lapsed.pitch_id == pitch_ids[0]
        # The hold has lapsed, so the pitch went to someone who paid.
        taken = await _book(session, status=PaymentStatus.PAID, now=later, user_id="guest-2")
        assert taken.pitch_id == pitch_ids[0]

        paid = await reservation_service.mark_paid(session, lapsed.id, now=later)
    assert paid.payment_status is PaymentStatus.PAID
    assert paid.pitch_id == pitch_ids[1]
    assert not paid.needs_attention


async def test_late_payment_without_room_is_flagged(campground, db_url: str) -> None:
    created = datetime(2025, 8, 1, 10, 0, tzinfo=UTC)
    later = created + timedelta(hours=2)
    async with get_sessionmaker(db_url)() as session:
        lapsed = await _book(session, now=created)
        for index in campground["pitch_ids"]:
            await _book(session, status=PaymentStatus.PAID, now=later, user_id=f"g{index}")

        paid = await reservation_service.mark_paid(session, lapsed.id, now=later)
    assert paid.payment_status is PaymentStatus.PAID
    assert paid.pitch_id is None
    assert paid.needs_attention


async def test_webhook_event_is_applied_once(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        reservation = await _book(session)
        event = {"id": "evt_1", "reservation_id": reservation.id, "status": "paid"}

        assert await payments_service.process_event(session, event) == {"status": "processed"}
        assert await payments_service.process_event(session, event) == {"status": "duplicate"}

        stored = await reservation_service.get_reservation(session, reservation.id)
        count = await session.scalar(select(func.count()).select_from(PaymentEvent))
    assert stored.payment_status is PaymentStatus.PAID
    assert count == 1


async def test_webhook_ignores_and_rejects(campground, db_url: str) -> None:
    async with get_sessionmaker(db_url)() as session:
        reservation_id = (await _book(session)).id
        unknown_status = await payments_service.process_event(
            session, {"id": "evt_2", "reservation_id": reservation_id, "status": "chargeback"}
        )
        unknown_reservation = await payments_service.process_event(
            session, {"id": "evt_3", "reservation_id": 9999, "status": "paid"}
        )
        rejected = await payments_service.process_event(
            session, {"id": "evt_4", "reservation_id": reservation_id, "status": "refunded"}
        )
        stored = await reservation_service.get_reservation(session, reservation_id)

    assert unknown_status == {"status": "ignored"}
    assert unknown_reservation == {"status": "ignored"}
    assert rejected == {"status": "rejected"}
    assert stored.payment_status is PaymentStatus.PENDING
