"""Extras catalog shown at checkout."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.schemas.extra import ExtraRead
from campground.services import pricing_service

router = APIRouter()


@router.get("", response_model=list[ExtraRead], summary="List bookable extras")
async def list_extras(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[ExtraRead]:
    extras = await pricing_service.list_active_extras(session)
    return [ExtraRead.model_validate(extra) for extra in extras]
