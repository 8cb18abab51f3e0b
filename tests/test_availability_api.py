"""Public availability and catalog endpoints."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_availability_preview(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get(
        "/api/v1/availability",
        params={"start_date": "2030-05-01", "end_date": "2030-05-03"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["available"] is True
    assert body["pitch_id"] == app_context["pitch_ids"][0]

    invalid = await client.get(
        "/api/v1/availability",
        params={"start_date": "2030-05-03", "end_date": "2030-05-01"},
    )
    assert invalid.status_code == 400


async def test_sold_out_calendar(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    for _ in app_context["pitch_ids"]:
        created = await client.post(
            "/api/v1/reservations",
            json={
                "start_date": "2030-05-02",
                "end_date": "2030-05-04",
                "guest": {
                    "full_name": "Joan Puig",
                    "dni": "44556677e",
                    "phone": "655555555",
                    "license_plate": "2222eee",
                },
            },
            headers=app_context["guest_headers"],
        )
        assert created.status_code == 201

    response = await client.get(
        "/api/v1/availability/sold-out",
        params={"from_date": "2030-05-01", "to_date": "2030-05-05"},
    )
    assert response.status_code == 200
    assert response.json()["dates"] == ["2030-05-02", "2030-05-03"]

    preview = await client.get(
        "/api/v1/availability",
        params={"start_date": "2030-05-03", "end_date": "2030-05-05"},
    )
    assert preview.json()["available"] is False
    assert preview.json()["message"]

    backwards = await client.get(
        "/api/v1/availability/sold-out",
        params={"from_date": "2030-05-05", "to_date": "2030-05-01"},
    )
    assert backwards.status_code == 400


async def test_extras_catalog(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/extras")
    assert response.status_code == 200
    by_code = {extra["code"]: extra for extra in response.json()}
    assert set(by_code) == {"PERSON", "PET", "POWER"}
    assert by_code["POWER"]["pricing"] == "toggle"
    assert by_code["POWER"]["unit_limit"] == 1
    assert by_code["PERSON"]["unit_limit"] == 4
