"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from campground.core.config import get_settings
from campground.core.security import decode_access_token
from campground.db.session import get_session
from campground.models.owner import Owner

settings = get_settings()

# Tokens are minted by the hosted auth provider.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True, slots=True)
class RequestUser:
    """Caller identity resolved from the bearer token."""

    user_id: str
    is_operator: bool = False


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> RequestUser:
    """Authenticate request via bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as exc:  # pragma: no cover - handled as HTTP 401
        raise credentials_exception from exc

    subject = payload.get("sub")
    if not subject:
        raise credentials_exception

    owner = await session.get(Owner, str(subject))
    return RequestUser(user_id=str(subject), is_operator=owner is not None)


async def get_current_operator(
    current_user: Annotated[RequestUser, Depends(get_current_user)],
) -> RequestUser:
    """Ensure the caller is a campground operator."""
    if not current_user.is_operator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )
    return current_user


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"<count>/<unit>"`` limits such as ``"6/minute"``."""
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    window = window_str.strip().lower()
    seconds_map = {
        "second": 1,
        "seconds": 1,
        "minute": 60,
        "minutes": 60,
        "hour": 3600,
        "hours": 3600,
        "day": 86400,
        "days": 86400,
    }
    seconds = seconds_map.get(window, fallback[1])
    return count, seconds


def rate_dependency(limit: tuple[int, int]):
    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


DEFAULT_RATE_DEP = rate_dependency(
    parse_rate(settings.rate_limit_default, fallback=(100, 60))
)
ACCESS_PASS_RATE_DEP = rate_dependency(
    parse_rate(settings.rate_limit_access_pass, fallback=(6, 60))
)
