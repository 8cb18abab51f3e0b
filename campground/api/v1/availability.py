"""Public availability lookups for the booking calendar."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.core.dates import DateRange
from campground.schemas.availability import AvailabilityRead, SoldOutDates
from campground.services import availability_service
from campground.services.availability_service import NoAvailability

router = APIRouter()

_MAX_CALENDAR_DAYS = 400


@router.get(
    "/sold-out",
    response_model=SoldOutDates,
    summary="Days with no free pitch",
)
async def sold_out(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    from_date: Annotated[date, Query()],
    to_date: Annotated[date, Query()],
) -> SoldOutDates:
    if (to_date - from_date).days > _MAX_CALENDAR_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Calendar window cannot exceed {_MAX_CALENDAR_DAYS} days",
        )
    try:
        dates = await availability_service.sold_out_dates(
            session, from_date=from_date, to_date=to_date
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SoldOutDates(from_date=from_date, to_date=to_date, dates=dates)


@router.get("", response_model=AvailabilityRead, summary="Check a date range")
async def check_availability(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
) -> AvailabilityRead:
    """Preview the pitch a booking would get; nothing is reserved."""
    try:
        date_range = DateRange(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    outcome = await availability_service.assign_pitch(session, date_range)
    if isinstance(outcome, NoAvailability):
        return AvailabilityRead(
            start_date=start_date,
            end_date=end_date,
            available=False,
            message=outcome.message,
        )
    return AvailabilityRead(
        start_date=start_date, end_date=end_date, available=True, pitch_id=outcome
    )
