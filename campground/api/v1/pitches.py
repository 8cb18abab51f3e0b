"""Pitch registry endpoints for operators."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.api.deps import RequestUser
from campground.schemas.pitch import PitchRead, PitchUpdate
from campground.services import pitch_service
from campground.services.pitch_service import PitchStatus

router = APIRouter()


@router.get("", response_model=list[PitchRead], summary="Pitches with live status")
async def list_pitches(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
) -> list[PitchRead]:
    statuses = await pitch_service.live_statuses(session)
    pitches = await pitch_service.list_pitches(session)
    return [
        PitchRead(
            id=pitch.id,
            name=pitch.name,
            is_active=pitch.is_active,
            status=statuses.get(pitch.id, PitchStatus.FREE),
        )
        for pitch in pitches
    ]


@router.patch("/{pitch_id}", response_model=PitchRead, summary="Activate or retire a pitch")
async def update_pitch(
    pitch_id: int,
    payload: PitchUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
) -> PitchRead:
    pitch = await pitch_service.get_pitch(session, pitch_id)
    if pitch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pitch not found")
    pitch = await pitch_service.set_pitch_active(
        session, pitch=pitch, is_active=payload.is_active
    )
    statuses = await pitch_service.live_statuses(session)
    return PitchRead(
        id=pitch.id,
        name=pitch.name,
        is_active=pitch.is_active,
        status=statuses.get(pitch.id, PitchStatus.FREE),
    )
