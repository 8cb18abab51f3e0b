"""Payment provider callbacks driving reservation payment status."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campground.models import PaymentEvent, PaymentStatus
from campground.services import reservation_service

logger = logging.getLogger(__name__)

_STATUS_MAP: Mapping[str, PaymentStatus] = {
    "pending": PaymentStatus.PENDING,
    "paid": PaymentStatus.PAID,
    "succeeded": PaymentStatus.PAID,
    "refunded": PaymentStatus.REFUNDED,
}


def _to_status(status: Any) -> PaymentStatus | None:
    return _STATUS_MAP.get(str(status or "").lower())


async def _already_recorded(session: AsyncSession, event_id: str) -> bool:
    result = await session.execute(
        select(PaymentEvent.id).where(PaymentEvent.provider_event_id == event_id)
    )
    return result.scalar_one_or_none() is not None


async def _record_event(
    session: AsyncSession, event_id: str, payload: dict[str, Any]
) -> None:
    session.add(PaymentEvent(provider_event_id=event_id, raw=payload))
    try:
        await session.commit()
    except IntegrityError:  # duplicate events are ignored
        await session.rollback()


async def process_event(
    session: AsyncSession,
    payload: dict[str, Any],
    *,
    record_event: bool = True,
) -> dict[str, Any]:
    """Apply ``{id, reservation_id, status}`` to the matching reservation.

    Unknown statuses and reservations are acknowledged as ``ignored`` so the
    provider does not retry them; replayed event ids are not applied twice.
    """
    event_id = str(payload.get("id") or uuid4())
    if record_event and await _already_recorded(session, event_id):
        return {"status": "duplicate"}

    status_payload = "ignored"
    target = _to_status(payload.get("status"))
    try:
        reservation_id = int(payload.get("reservation_id"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        reservation_id = None

    if target is not None and reservation_id is not None:
        try:
            reservation = await reservation_service.transition_payment_status(
                session, reservation_id=reservation_id, target=target
            )
        except reservation_service.InvalidStatusTransitionError as exc:
            logger.warning("Payment event %s rejected: %s", event_id, exc)
            status_payload = "rejected"
        else:
            if reservation is None:
                logger.warning(
                    "Payment event %s for unknown reservation %s", event_id, reservation_id
                )
            else:
                status_payload = "processed"
                if reservation.needs_attention:
                    logger.warning(
                        "Reservation %s paid without a free pitch; operator attention required",
                        reservation.id,
                    )

    if record_event:
        await _record_event(session, event_id, payload)

    return {"status": status_payload}
