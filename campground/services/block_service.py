"""Maintenance and manual occupancy blocks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.dates import DateRange
from campground.models.block import Block, BlockKind
from campground.models.pitch import Pitch
from campground.services import availability_service, reassignment_service
from campground.services.reassignment_service import ReassignmentReport

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BlockResult:
    """A created block and, for maintenance, the reassignment outcome."""

    block: Block
    report: ReassignmentReport | None = None


async def list_blocks(
    session: AsyncSession,
    *,
    pitch_id: int | None = None,
) -> list[Block]:
    stmt = select(Block).order_by(Block.start_date, Block.id)
    if pitch_id is not None:
        stmt = stmt.where(Block.pitch_id == pitch_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_block(session: AsyncSession, block_id: int) -> Block | None:
    return await session.get(Block, block_id)


async def active_blocks_for(session: AsyncSession, day: date) -> list[Block]:
    """Blocks covering the night of ``day``."""
    night = DateRange.single_day(day)
    result = await session.execute(
        select(Block)
        .where(Block.start_date < night.end, Block.end_date > night.start)
        .order_by(Block.pitch_id, Block.id)
    )
    return list(result.scalars().all())


async def create_block(
    session: AsyncSession,
    *,
    pitch_id: int,
    date_range: DateRange,
    kind: BlockKind,
    reason: str | None = None,
    created_by: str | None = None,
    now: datetime | None = None,
) -> BlockResult:
    """Persist a block; maintenance blocks migrate conflicting paid stays."""
    if await session.get(Pitch, pitch_id) is None:
        raise ValueError("Pitch not found")

    async def _persist() -> Block:
        block = Block(
            pitch_id=pitch_id,
            kind=kind,
            start_date=date_range.start,
            end_date=date_range.end,
            reason=reason.strip() if reason else None,
            created_by=created_by,
        )
        session.add(block)
        await session.flush()
        return block

    block = await availability_service.run_assignment(session, _persist)
    logger.info(
        "%s block %s created on pitch %s for %s -> %s",
        kind.value.capitalize(),
        block.id,
        pitch_id,
        date_range.start.isoformat(),
        date_range.end.isoformat(),
    )
    if kind is not BlockKind.MAINTENANCE:
        return BlockResult(block=block)

    report = await reassignment_service.on_maintenance_block_created(
        session, pitch_id, date_range, now=now
    )
    return BlockResult(block=block, report=report)


async def delete_block(session: AsyncSession, *, block: Block) -> None:
    await session.delete(block)
    await session.commit()
    logger.info("Block %s removed from pitch %s", block.id, block.pitch_id)
