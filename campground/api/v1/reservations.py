"""Reservation booking and management API."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.api.deps import RequestUser
from campground.core.config import get_settings
from campground.models.reservation import PaymentStatus, Reservation
from campground.schemas.access import AccessPassRead
from campground.schemas.reservation import (
    MyReservations,
    PitchOverrideRequest,
    ReservationCreate,
    ReservationRead,
    ReservationSummary,
)
from campground.services import access_service, reservation_service
from campground.services.access_service import Denied
from campground.services.availability_service import (
    AssignmentConflictError,
    NoAvailability,
)
from campground.services.reservation_service import GuestSnapshot

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=access_service.RESERVATION_NOT_FOUND,
    )


def _busy(exc: AssignmentConflictError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
    )


def _visible_to(reservation: Reservation | None, user: RequestUser) -> bool:
    if reservation is None:
        return False
    return user.is_operator or reservation.user_id == user.user_id


@router.post(
    "",
    response_model=ReservationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book a stay",
    dependencies=[deps.DEFAULT_RATE_DEP],
)
async def create_reservation(
    payload: ReservationCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[RequestUser, Depends(deps.get_current_user)],
) -> ReservationRead:
    guest = payload.guest
    try:
        outcome = await reservation_service.create_reservation(
            session,
            user_id=current_user.user_id,
            date_range=payload.date_range(),
            guest=GuestSnapshot(
                full_name=guest.full_name,
                dni=guest.dni,
                phone=guest.phone,
                license_plate=guest.license_plate,
            ),
            extras=payload.selections(),
        )
    except AssignmentConflictError as exc:
        raise _busy(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if isinstance(outcome, NoAvailability):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=outcome.message)
    return ReservationRead.model_validate(outcome)


@router.get("/mine", response_model=MyReservations, summary="My stays")
async def my_reservations(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[RequestUser, Depends(deps.get_current_user)],
) -> MyReservations:
    reservations = await reservation_service.list_user_reservations(
        session, user_id=current_user.user_id
    )
    now = datetime.now(UTC)
    buckets = access_service.categorize_reservations(reservations, now)
    selected = access_service.default_reservation(reservations, now)
    return MyReservations(
        default_reservation_id=selected.id if selected is not None else None,
        active=[ReservationRead.model_validate(r) for r in buckets.active],
        upcoming=[ReservationRead.model_validate(r) for r in buckets.upcoming],
        past=[ReservationRead.model_validate(r) for r in buckets.past],
    )


@router.get("", response_model=list[ReservationSummary], summary="Search reservations")
async def search_reservations(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
    payment_status: PaymentStatus | None = None,
    q: Annotated[str | None, Query(description="Reservation id fragment")] = None,
    name: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1)] = 50,
) -> list[ReservationSummary]:
    reservations = await reservation_service.search_reservations(
        session,
        status=payment_status,
        reservation_id_fragment=q,
        name=name,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=min(limit, 100),
    )
    return [ReservationSummary.model_validate(obj) for obj in reservations]


@router.get(
    "/{reservation_id}", response_model=ReservationRead, summary="Get reservation"
)
async def get_reservation(
    reservation_id: int,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[RequestUser, Depends(deps.get_current_user)],
) -> ReservationRead:
    reservation = await reservation_service.get_reservation(session, reservation_id)
    if not _visible_to(reservation, current_user):
        raise _not_found()
    return ReservationRead.model_validate(reservation)


@router.post(
    "/{reservation_id}/assign-pitch",
    response_model=ReservationRead,
    summary="Assign a pitch manually",
)
async def assign_pitch(
    reservation_id: int,
    payload: PitchOverrideRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
) -> ReservationRead:
    try:
        reservation = await reservation_service.override_pitch(
            session, reservation_id=reservation_id, pitch_id=payload.pitch_id
        )
    except AssignmentConflictError as exc:
        raise _busy(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if reservation is None:
        raise _not_found()
    return ReservationRead.model_validate(reservation)


@router.post(
    "/{reservation_id}/access-pass",
    response_model=AccessPassRead,
    summary="Issue a rotating access pass",
    dependencies=[deps.ACCESS_PASS_RATE_DEP],
)
async def issue_access_pass(
    reservation_id: int,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[RequestUser, Depends(deps.get_current_user)],
) -> AccessPassRead:
    """Return a fresh pass; the client polls again after ``refresh_after_seconds``."""
    reservation = await session.get(Reservation, reservation_id)
    if reservation is None or reservation.user_id != current_user.user_id:
        raise _not_found()
    outcome = await access_service.issue(session, reservation_id)
    if isinstance(outcome, Denied):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=outcome.reason)
    return AccessPassRead(
        reservation_id=outcome.reservation_id,
        qr_pass=outcome.pass_value,
        issued_at=outcome.issued_at,
        expires_at=outcome.expires_at,
        refresh_after_seconds=get_settings().access_pass_ttl_seconds,
    )
