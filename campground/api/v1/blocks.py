"""Maintenance and manual blocks on pitches."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.api.deps import RequestUser
from campground.schemas.block import BlockCreate, BlockCreated, BlockRead, ReassignmentReportRead
from campground.services import block_service
from campground.services.availability_service import AssignmentConflictError

router = APIRouter()


@router.get("", response_model=list[BlockRead], summary="List blocks")
async def list_blocks(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
    day: date | None = None,
    pitch_id: int | None = None,
) -> list[BlockRead]:
    """List every block, or only those covering the night of ``day``."""
    if day is not None:
        blocks = await block_service.active_blocks_for(session, day)
        if pitch_id is not None:
            blocks = [block for block in blocks if block.pitch_id == pitch_id]
    else:
        blocks = await block_service.list_blocks(session, pitch_id=pitch_id)
    return [BlockRead.model_validate(block) for block in blocks]


@router.post(
    "",
    response_model=BlockCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Block a pitch",
)
async def create_block(
    payload: BlockCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[RequestUser, Depends(deps.get_current_operator)],
) -> BlockCreated:
    """Create a block; maintenance blocks report which stays were moved."""
    try:
        result = await block_service.create_block(
            session,
            pitch_id=payload.pitch_id,
            date_range=payload.date_range(),
            kind=payload.kind,
            reason=payload.reason,
            created_by=current_user.user_id,
        )
    except AssignmentConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except ValueError as exc:
        detail = str(exc)
        code = (
            status.HTTP_404_NOT_FOUND
            if detail == "Pitch not found"
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=detail) from exc
    report = (
        ReassignmentReportRead.model_validate(result.report)
        if result.report is not None
        else None
    )
    return BlockCreated(block=BlockRead.model_validate(result.block), reassignment=report)


@router.delete(
    "/{block_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove a block"
)
async def delete_block(
    block_id: int,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[RequestUser, Depends(deps.get_current_operator)],
) -> Response:
    block = await block_service.get_block(session, block_id)
    if block is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Block not found")
    await block_service.delete_block(session, block=block)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
