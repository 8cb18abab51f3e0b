"""Operator dashboard metrics."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.dates import DateRange, Period, coerce_utc
from campground.models.reservation import PaymentStatus
from campground.services import pitch_service, reservation_service
from campground.services.pitch_service import PitchStatus


@dataclass(slots=True)
class Metrics:
    period_start: date
    period_end: date
    occupied_count: int = 0
    free_count: int = 0
    maintenance_count: int = 0
    inactive_count: int = 0
    occupancy_pct: int = 0
    check_ins: int = 0
    check_outs: int = 0
    pending_count: int = 0
    stays_revenue_cents: int = 0
    extras_revenue_cents_by_code: dict[str, int] = field(default_factory=dict)

    @property
    def extras_revenue_cents(self) -> int:
        return sum(self.extras_revenue_cents_by_code.values())

    @property
    def total_revenue_cents(self) -> int:
        return self.stays_revenue_cents + self.extras_revenue_cents

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_start": self.period_start,
            "period_end": self.period_end,
            "occupied_count": self.occupied_count,
            "free_count": self.free_count,
            "maintenance_count": self.maintenance_count,
            "inactive_count": self.inactive_count,
            "occupancy_pct": self.occupancy_pct,
            "check_ins": self.check_ins,
            "check_outs": self.check_outs,
            "pending_count": self.pending_count,
            "stays_revenue_cents": self.stays_revenue_cents,
            "extras_revenue_cents_by_code": dict(self.extras_revenue_cents_by_code),
            "total_revenue_cents": self.total_revenue_cents,
        }


def _occupancy_pct(occupied: int, active_pitches: int) -> int:
    if active_pitches <= 0:
        return 0
    return round(occupied / active_pitches * 100)


async def _apply_live_counts(
    session: AsyncSession, metrics: Metrics, now: datetime
) -> None:
    statuses = await pitch_service.live_statuses(session, at=now)
    counts: dict[PitchStatus, int] = defaultdict(int)
    for status in statuses.values():
        counts[status] += 1
    metrics.occupied_count = counts[PitchStatus.OCCUPIED]
    metrics.free_count = counts[PitchStatus.FREE]
    metrics.maintenance_count = counts[PitchStatus.MAINTENANCE]
    metrics.inactive_count = counts[PitchStatus.INACTIVE]
    active_pitches = len(statuses) - metrics.inactive_count
    metrics.occupancy_pct = _occupancy_pct(metrics.occupied_count, active_pitches)


async def compute(
    session: AsyncSession,
    period: Period,
    *,
    now: datetime | None = None,
) -> Metrics:
    """Compute dashboard metrics for ``period``.

    Reservation figures (check-ins, check-outs, revenue) cover the period;
    pitch counts describe the fleet as of ``now`` regardless of the period.
    Owner stays are left out of every reservation figure.
    """
    now = coerce_utc(now or datetime.now(UTC))
    window = period.as_range()
    metrics = Metrics(period_start=window.start, period_end=window.end)

    await _apply_live_counts(session, metrics, now)

    # Widen by one night so stays checking out on the first day are seen.
    paid = await reservation_service.list_overlapping(
        session,
        pitch_id=None,
        date_range=DateRange(window.start - timedelta(days=1), window.end),
        statuses={PaymentStatus.PAID},
        exclude_owners=True,
    )
    extras_by_code: dict[str, int] = defaultdict(int)
    for reservation in paid:
        if window.contains(reservation.start_date):
            metrics.check_ins += 1
        if window.contains(reservation.end_date):
            metrics.check_outs += 1
        if not reservation.date_range.overlaps(window):
            continue
        metrics.stays_revenue_cents += reservation.nightly_amount_cents * reservation.nights
        for line in reservation.extras:
            extras_by_code[line.extra.code] += line.line_total_cents
    metrics.extras_revenue_cents_by_code = dict(sorted(extras_by_code.items()))

    pending = await reservation_service.list_overlapping(
        session,
        pitch_id=None,
        date_range=window,
        statuses={PaymentStatus.PENDING, PaymentStatus.UNPAID},
        exclude_owners=True,
    )
    metrics.pending_count = len(pending)
    return metrics
