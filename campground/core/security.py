"""JWT handling for caller identity and access passes."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from campground.core.config import get_settings

ACCESS_PASS_TYPE = "access-pass"


def create_access_token(
    subject: str, expires_delta: timedelta | None = None, **extra: Any
) -> str:
    """Create a JWT shaped like the ones issued by the auth provider."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(hours=1)
    expire = datetime.now(UTC) + expires_delta
    claims: dict[str, Any] = {"sub": subject, "exp": expire}
    if settings.jwt_audience:
        claims["aud"] = settings.jwt_audience
    claims.update(extra)
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode a bearer token, raising JWTError on failure."""
    settings = get_settings()
    options = {"verify_aud": settings.jwt_audience is not None}
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options=options,
    )


def encode_access_pass(claims: dict[str, Any]) -> str:
    settings = get_settings()
    payload = dict(claims)
    payload["typ"] = ACCESS_PASS_TYPE
    return jwt.encode(payload, settings.access_pass_secret, algorithm="HS256")


def decode_access_pass(pass_value: str) -> dict[str, Any]:
    """Verify signature and expiry of an access pass, raising JWTError on failure."""
    settings = get_settings()
    claims = jwt.decode(pass_value, settings.access_pass_secret, algorithms=["HS256"])
    if claims.get("typ") != ACCESS_PASS_TYPE:
        raise JWTError("Token is not an access pass")
    return claims
