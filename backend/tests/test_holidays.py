"""Tests for holiday management endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest

from leave_ledger.exceptions import AppError, NotFoundError
from leave_ledger.models.enums import HolidayType
from leave_ledger.schemas.holiday import CreateHolidayRequest
from leave_ledger.services.holiday import create_holiday, delete_holiday, get_holiday, list_holidays

from helpers import ADMIN, ADMIN_HEADERS, EMPLOYEE_HEADERS

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession


async def test_create_and_list_holidays(db_session: AsyncSession) -> None:
    await create_holiday(
        db_session, ADMIN, CreateHolidayRequest(holiday_date=date(2024, 9, 16), description="Día de la Independencia")
    )
    await create_holiday(
        db_session,
        ADMIN,
        CreateHolidayRequest(holiday_date=date(2025, 1, 1), description="Año Nuevo", type=HolidayType.OFFICIAL),
    )
    company = await create_holiday(
        db_session,
        ADMIN,
        CreateHolidayRequest(
            holiday_date=date(2024, 12, 24), description="Nochebuena", type=HolidayType.COMPANY, full_day=False
        ),
    )
    assert company.type == HolidayType.COMPANY
    assert not company.full_day

    everything = await list_holidays(db_session)
    assert everything.total == 3
    assert [h.holiday_date for h in everything.items] == [date(2024, 9, 16), date(2024, 12, 24), date(2025, 1, 1)]

    in_2024 = await list_holidays(db_session, year=2024)
    assert in_2024.total == 2

    page = await list_holidays(db_session, offset=1, limit=1)
    assert page.total == 3
    assert [h.description for h in page.items] == ["Nochebuena"]


async def test_duplicate_holiday(db_session: AsyncSession) -> None:
    payload = CreateHolidayRequest(holiday_date=date(2024, 9, 16), description="Día de la Independencia")
    await create_holiday(db_session, ADMIN, payload)

    with pytest.raises(AppError) as exc_info:
        await create_holiday(db_session, ADMIN, payload)
    assert exc_info.value.status_code == 409


async def test_delete_holiday(db_session: AsyncSession) -> None:
    created = await create_holiday(
        db_session, ADMIN, CreateHolidayRequest(holiday_date=date(2024, 11, 18), description="Revolución")
    )

    await delete_holiday(db_session, ADMIN, created.id)

    with pytest.raises(NotFoundError):
        await get_holiday(db_session, created.id)
    with pytest.raises(NotFoundError):
        await delete_holiday(db_session, ADMIN, uuid.uuid4())


async def test_http_holiday_admin_only(async_client: AsyncClient) -> None:
    body = {"holiday_date": "2024-09-16", "description": "Día de la Independencia"}

    response = await async_client.post("/holidays", json=body, headers=EMPLOYEE_HEADERS)
    assert response.status_code == 403

    response = await async_client.post("/holidays", json=body, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    holiday_id = response.json()["id"]

    response = await async_client.get("/holidays", params={"year": 2024}, headers=EMPLOYEE_HEADERS)
    assert response.json()["total"] == 1

    response = await async_client.delete(f"/holidays/{holiday_id}", headers=ADMIN_HEADERS)
    assert response.status_code == 204


async def test_http_working_days(async_client: AsyncClient) -> None:
    await async_client.post(
        "/holidays",
        json={"holiday_date": "2024-09-16", "description": "Día de la Independencia"},
        headers=ADMIN_HEADERS,
    )

    response = await async_client.get(
        "/holidays/working-days",
        params={"start_date": "2024-09-09", "end_date": "2024-09-22"},
        headers=EMPLOYEE_HEADERS,
    )
    assert response.status_code == 200
    assert response.json() == {
        "start_date": "2024-09-09",
        "end_date": "2024-09-22",
        "calendar_days": 14,
        "working_days": 11,
        "rest_days": 2,
        "holidays": 1,
    }

    response = await async_client.get(
        "/holidays/working-days",
        params={"start_date": "2024-09-22", "end_date": "2024-09-09"},
        headers=EMPLOYEE_HEADERS,
    )
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidInputError"
