"""Operator dashboard."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.api.deps import RequestUser
from campground.core.dates import Period, PeriodKind
from campground.schemas.dashboard import DashboardRead
from campground.services import dashboard_service

router = APIRouter()


@router.get("", response_model=DashboardRead, summary="Dashboard metrics")
async def get_dashboard(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
    period: PeriodKind = PeriodKind.DAY,
    anchor: date | None = None,
) -> DashboardRead:
    now = datetime.now(UTC)
    metrics = await dashboard_service.compute(
        session, Period(kind=period, anchor=anchor or now.date()), now=now
    )
    return DashboardRead(**metrics.to_dict())
