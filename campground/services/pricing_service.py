"""Checkout pricing for stays and per-night extras."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.config import get_settings
from campground.models.extra import Extra


class InvalidExtraSelectionError(ValueError):
    """Raised when a requested extra or quantity is not bookable."""


@dataclass(slots=True)
class PricingLine:
    """Priced extra selected at checkout."""

    extra_id: int
    code: str
    quantity: int
    unit_amount_cents: int
    line_total_cents: int


@dataclass(slots=True)
class PricingQuote:
    """Aggregate pricing output for a stay."""

    nights: int
    nightly_amount_cents: int
    stay_total_cents: int
    items: list[PricingLine] = field(default_factory=list)

    @property
    def extras_total_cents(self) -> int:
        return sum(item.line_total_cents for item in self.items)

    @property
    def total_cents(self) -> int:
        return self.stay_total_cents + self.extras_total_cents


def line_total_cents(quantity: int, nights: int, unit_amount_cents: int) -> int:
    """Per-night charge for an extra; toggles use quantity as an on/off factor."""
    return quantity * nights * unit_amount_cents


async def list_active_extras(session: AsyncSession) -> list[Extra]:
    result = await session.execute(
        select(Extra).where(Extra.is_active.is_(True)).order_by(Extra.id)
    )
    return list(result.scalars().all())


def quote(
    *,
    nights: int,
    extras: Mapping[int, Extra],
    selections: Mapping[int, int],
    nightly_amount_cents: int | None = None,
) -> PricingQuote:
    """Price a stay of ``nights`` with the chosen ``{extra_id: quantity}``.

    Zero quantities are dropped. Every other selection must reference an
    active extra and respect its unit limit.
    """
    if nights <= 0:
        raise InvalidExtraSelectionError("A stay must last at least one night")
    nightly = (
        nightly_amount_cents
        if nightly_amount_cents is not None
        else get_settings().default_nightly_cents
    )
    result = PricingQuote(
        nights=nights,
        nightly_amount_cents=nightly,
        stay_total_cents=nightly * nights,
    )
    for extra_id, quantity in sorted(selections.items()):
        if quantity < 0:
            raise InvalidExtraSelectionError("Extra quantities cannot be negative")
        if quantity == 0:
            continue
        extra = extras.get(extra_id)
        if extra is None or not extra.is_active:
            raise InvalidExtraSelectionError(f"Extra {extra_id} is not available")
        if quantity > extra.unit_limit:
            raise InvalidExtraSelectionError(
                f"Extra {extra.code} allows at most {extra.unit_limit} unit(s)"
            )
        result.items.append(
            PricingLine(
                extra_id=extra.id,
                code=extra.code,
                quantity=quantity,
                unit_amount_cents=extra.unit_amount_cents,
                line_total_cents=line_total_cents(
                    quantity, nights, extra.unit_amount_cents
                ),
            )
        )
    return result


async def quote_stay(
    session: AsyncSession,
    *,
    nights: int,
    selections: Mapping[int, int],
    nightly_amount_cents: int | None = None,
) -> PricingQuote:
    """Load the referenced extras and price the stay."""
    extras: dict[int, Extra] = {}
    wanted = [extra_id for extra_id, quantity in selections.items() if quantity]
    if wanted:
        result = await session.execute(select(Extra).where(Extra.id.in_(wanted)))
        extras = {extra.id: extra for extra in result.scalars().all()}
    return quote(
        nights=nights,
        extras=extras,
        selections=selections,
        nightly_amount_cents=nightly_amount_cents,
    )
