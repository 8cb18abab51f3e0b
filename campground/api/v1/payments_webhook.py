"""Payment provider webhook receiver and local simulator."""

from __future__ import annotations

import json
import secrets
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from campground.api import deps
from campground.core.config import get_settings
from campground.core.settings import get_payment_settings
from campground.schemas.payment import PaymentEventIn, PaymentEventResult
from campground.services import payments_service
from campground.services.availability_service import AssignmentConflictError

router = APIRouter(prefix="/payments", tags=["payments-webhook"])


def _verify_secret(request: Request) -> None:
    settings = get_payment_settings()
    if not settings.webhook_verify:
        return
    provided = request.headers.get("X-Webhook-Secret")
    if not provided:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing signature header",
        )
    expected = settings.webhook_secret or ""
    if not expected or not secrets.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature"
        )


@router.post(
    "/webhook", response_model=PaymentEventResult, status_code=status.HTTP_200_OK
)
async def handle_webhook(
    request: Request,
    session: AsyncSession = Depends(deps.get_db_session),
) -> PaymentEventResult:
    _verify_secret(request)
    try:
        payload = await request.json()
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload"
        ) from exc
    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload"
        )
    try:
        outcome = await payments_service.process_event(session, payload)
    except AssignmentConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return PaymentEventResult(**outcome)


@router.post(
    "/dev/simulate-webhook",
    response_model=PaymentEventResult,
    status_code=status.HTTP_200_OK,
)
async def simulate_webhook(
    payload: PaymentEventIn,
    session: AsyncSession = Depends(deps.get_db_session),
) -> PaymentEventResult:
    settings = get_settings()
    if settings.app_env.lower() != "local":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Simulation route available in local environment only",
        )

    event = payload.model_dump()
    event["id"] = payload.id or f"simulated_{uuid4().hex}"
    outcome = await payments_service.process_event(session, event)
    return PaymentEventResult(**outcome)
