"""Provision pitches, the default extras catalog and an operator account."""

from __future__ import annotations

import argparse
import asyncio

from sqlalchemy import func, select

from campground.db.session import get_sessionmaker
from campground.models import Extra, ExtraPricing, Owner, Pitch

DEFAULT_EXTRAS = (
    ("PERSON", "Extra person", 500, ExtraPricing.METERED, 4),
    ("PET", "Pet", 300, ExtraPricing.METERED, 2),
    ("POWER", "Power hookup", 300, ExtraPricing.TOGGLE, 1),
)


async def seed(*, pitch_count: int, operator_id: str | None) -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        existing_pitches = await session.scalar(select(func.count()).select_from(Pitch)) or 0
        pitches_created = 0
        for index in range(existing_pitches + 1, pitch_count + 1):
            session.add(Pitch(name=f"P{index}"))
            pitches_created += 1

        codes = set((await session.execute(select(Extra.code))).scalars().all())
        extras_created = 0
        for code, name, amount, pricing, max_units in DEFAULT_EXTRAS:
            if code in codes:
                continue
            session.add(
                Extra(
                    code=code,
                    name=name,
                    unit_amount_cents=amount,
                    pricing=pricing,
                    max_units=max_units,
                )
            )
            extras_created += 1

        if operator_id and await session.get(Owner, operator_id) is None:
            session.add(Owner(user_id=operator_id, display_name="Operator"))
            print(f"Registered operator {operator_id}")

        await session.commit()

    print(f"Seeded {pitches_created} pitch(es) and {extras_created} extra(s).")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the campground catalog")
    parser.add_argument("--pitches", type=int, default=20, help="Total pitch count")
    parser.add_argument("--operator", default=None, help="Auth user id to register as operator")
    args = parser.parse_args()
    asyncio.run(seed(pitch_count=args.pitches, operator_id=args.operator))


if __name__ == "__main__":
    main()
