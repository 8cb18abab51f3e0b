"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Campground Booking API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default=None, alias="JWT_AUDIENCE")

    access_pass_secret: str = Field(default="", alias="ACCESS_PASS_SECRET")
    access_pass_ttl_seconds: int = Field(45, alias="ACCESS_PASS_TTL_SECONDS")
    access_window_lead_minutes: int = Field(120, alias="ACCESS_WINDOW_LEAD_MINUTES")

    default_nightly_cents: int = Field(1500, alias="DEFAULT_NIGHTLY_CENTS")
    pending_hold_minutes: int = Field(30, alias="PENDING_HOLD_MINUTES")

    assignment_lock_timeout_seconds: float = Field(
        5.0, alias="ASSIGNMENT_LOCK_TIMEOUT_SECONDS"
    )
    assignment_max_attempts: int = Field(3, alias="ASSIGNMENT_MAX_ATTEMPTS")
    assignment_retry_backoff_seconds: float = Field(
        0.05, alias="ASSIGNMENT_RETRY_BACKOFF_SECONDS"
    )

    payments_webhook_verify: bool = Field(default=True, alias="PAYMENTS_WEBHOOK_VERIFY")
    payments_webhook_secret: str | None = Field(
        default=None, alias="PAYMENTS_WEBHOOK_SECRET"
    )

    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:8081",
            "http://localhost:19006",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allowlist: list[str] = Field(
        default_factory=lambda: ["http://localhost:8081"], alias="CORS_ALLOWLIST"
    )

    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_access_pass: str = Field("6/minute", alias="RATE_LIMIT_ACCESS_PASS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        case_sensitive=False,
    )

    def model_post_init(self, __context: Any) -> None:
        """Fall back to the JWT secret when no pass secret is configured."""

        if not self.access_pass_secret:
            object.__setattr__(self, "access_pass_secret", self.jwt_secret_key)

    @field_validator("cors_allow_origins", "cors_allowlist", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
