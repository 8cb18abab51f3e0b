"""Specialized settings adapters for integrations."""

from __future__ import annotations

from pydantic import BaseModel

from campground.core.config import get_settings


class PaymentSettings(BaseModel):
    """Slim view of payment-webhook configuration."""

    webhook_secret: str | None = None
    webhook_verify: bool = True


class AssignmentSettings(BaseModel):
    """Tuning knobs for the pitch assignment critical section."""

    lock_timeout_seconds: float = 5.0
    max_attempts: int = 3
    retry_backoff_seconds: float = 0.05
    pending_hold_minutes: int = 30


def get_payment_settings() -> PaymentSettings:
    """Return payment-specific configuration."""

    settings = get_settings()
    return PaymentSettings(
        webhook_secret=settings.payments_webhook_secret or None,
        webhook_verify=settings.payments_webhook_verify,
    )


def get_assignment_settings() -> AssignmentSettings:
    """Return configuration for the pitch resolver."""

    settings = get_settings()
    return AssignmentSettings(
        lock_timeout_seconds=settings.assignment_lock_timeout_seconds,
        max_attempts=max(1, settings.assignment_max_attempts),
        retry_backoff_seconds=settings.assignment_retry_backoff_seconds,
        pending_hold_minutes=settings.pending_hold_minutes,
    )
