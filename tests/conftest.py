"""Test fixtures for the campground booking backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("PAYMENTS_WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("ASSIGNMENT_RETRY_BACKOFF_SECONDS", "0")

from campground.core.config import get_settings
from campground.core.security import create_access_token
from campground.db.base import Base
from campground.db.session import dispose_engine, get_engine, get_sessionmaker
from campground.main import app
from campground.models import Extra, ExtraPricing, Owner, Pitch

OPERATOR_ID = "operator-1"
GUEST_ID = "guest-1"
PITCH_COUNT = 3


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    async with get_engine(db_url).begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def campground(
    reset_database: AsyncIterator[None], db_url: str
) -> dict[str, object]:
    """Seed pitches, the extras catalog and one operator account."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        pitches = [Pitch(name=f"P{index}") for index in range(1, PITCH_COUNT + 1)]
        session.add_all(pitches)
        extras = {
            "PERSON": Extra(
                code="PERSON",
                name="Extra person",
                unit_amount_cents=500,
                pricing=ExtraPricing.METERED,
                max_units=4,
            ),
            "PET": Extra(
                code="PET",
                name="Pet",
                unit_amount_cents=300,
                pricing=ExtraPricing.METERED,
                max_units=2,
            ),
            "POWER": Extra(
                code="POWER",
                name="Power hookup",
                unit_amount_cents=300,
                pricing=ExtraPricing.TOGGLE,
                max_units=1,
            ),
        }
        session.add_all(extras.values())
        session.add(Owner(user_id=OPERATOR_ID, display_name="Front desk"))
        await session.commit()
        return {
            "pitch_ids": [pitch.id for pitch in pitches],
            "extra_ids": {code: extra.id for code, extra in extras.items()},
            "operator_id": OPERATOR_ID,
            "guest_id": GUEST_ID,
        }


@pytest.fixture()
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest_asyncio.fixture()
async def app_context(
    campground: dict[str, object],
    auth_headers: Callable[[str], dict[str, str]],
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client alongside the seeded campground."""
    context = dict(campground)
    context["operator_headers"] = auth_headers(OPERATOR_ID)
    context["guest_headers"] = auth_headers(GUEST_ID)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
