"""Dashboard schemas."""
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict


class DashboardRead(BaseModel):
    """Period figures plus the live state of the fleet."""

    period_start: date
    period_end: date
    occupied_count: int
    free_count: int
    maintenance_count: int
    inactive_count: int
    occupancy_pct: int
    check_ins: int
    check_outs: int
    pending_count: int
    stays_revenue_cents: int
    extras_revenue_cents_by_code: dict[str, int]
    total_revenue_cents: int

    model_config = ConfigDict(from_attributes=True)
