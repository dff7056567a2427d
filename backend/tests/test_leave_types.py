"""Tests for leave type configuration."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from leave_ledger.exceptions import AppError, NotFoundError, ReclassificationError
from leave_ledger.models.enums import AccrualBasis, LeaveClassification
from leave_ledger.schemas.leave_type import UpdateLeaveTypeRequest
from leave_ledger.services.accrual import compute_entitlement
from leave_ledger.services.balance import ensure_balance
from leave_ledger.services.leave_type import (
    get_leave_type,
    get_leave_type_response,
    list_leave_types,
    update_leave_type,
)

from helpers import ADMIN, ADMIN_HEADERS, EMPLOYEE_HEADERS, EMPLOYEE_HIRE_DATE, EMPLOYEE_ID, make_leave_type

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.leave_type import LeaveTypeResponse


async def test_classification_resolved_from_name(
    vacation_type: LeaveTypeResponse,
    matrimonio_type: LeaveTypeResponse,
    maternidad_type: LeaveTypeResponse,
) -> None:
    assert (vacation_type.classification, vacation_type.accrual_basis) == (
        LeaveClassification.ANNUAL,
        AccrualBasis.SENIORITY,
    )
    assert vacation_type.event_entitled_days is None
    assert matrimonio_type.classification == LeaveClassification.ONE_TIME
    assert matrimonio_type.event_entitled_days == 5
    assert maternidad_type.classification == LeaveClassification.EVENT_REPEATABLE
    assert maternidad_type.event_entitled_days == 84


async def test_explicit_settings_win(db_session: AsyncSession) -> None:
    created = await make_leave_type(
        db_session,
        "Paternidad",
        event_entitled_days=10,
        color_code="#2196F3",
    )
    assert created.classification == LeaveClassification.EVENT_REPEATABLE
    assert created.event_entitled_days == 10
    assert created.color_code == "#2196F3"

    custom = await make_leave_type(
        db_session,
        "Día de Cumpleaños",
        classification=LeaveClassification.ONE_TIME,
        event_entitled_days=1,
    )
    assert custom.classification == LeaveClassification.ONE_TIME
    assert custom.event_entitled_days == 1


async def test_event_days_dropped_for_annual_types(db_session: AsyncSession) -> None:
    created = await make_leave_type(db_session, "Incapacidad", event_entitled_days=3, max_days_per_year=30)
    assert created.classification == LeaveClassification.ANNUAL
    assert created.accrual_basis == AccrualBasis.FIXED
    assert created.event_entitled_days is None


async def test_fixed_annual_default_allowances(db_session: AsyncSession) -> None:
    incapacidad = await make_leave_type(db_session, "Incapacidad")
    fallecimiento = await make_leave_type(db_session, "Fallecimiento Familiar")
    sin_goce = await make_leave_type(db_session, "Permiso Sin Goce")
    personal = await make_leave_type(db_session, "Permiso Personal")

    assert incapacidad.max_days_per_year == 364
    assert fallecimiento.max_days_per_year == 5
    assert sin_goce.max_days_per_year == 5
    assert personal.max_days_per_year is None

    leave_type = await get_leave_type(db_session, fallecimiento.id)
    assert compute_entitlement(leave_type, EMPLOYEE_HIRE_DATE, 6).entitled_days == 5
    leave_type = await get_leave_type(db_session, personal.id)
    assert compute_entitlement(leave_type, EMPLOYEE_HIRE_DATE, 6).entitled_days == 0


async def test_configured_yearly_cap_wins_over_default(db_session: AsyncSession) -> None:
    created = await make_leave_type(db_session, "Fallecimiento Familiar", max_days_per_year=3)
    assert created.max_days_per_year == 3


async def test_duplicate_name(db_session: AsyncSession, vacation_type: LeaveTypeResponse) -> None:
    with pytest.raises(AppError) as exc_info:
        await make_leave_type(db_session, "Vacaciones Ordinarias")
    assert exc_info.value.status_code == 409


async def test_partial_update(db_session: AsyncSession, vacation_type: LeaveTypeResponse) -> None:
    updated = await update_leave_type(
        db_session,
        ADMIN,
        vacation_type.id,
        UpdateLeaveTypeRequest(description="Vacaciones de ley", min_notice_days=15, requires_approval=None),
    )

    assert updated.description == "Vacaciones de ley"
    assert updated.min_notice_days == 15
    assert updated.requires_approval is True
    assert updated.max_days_per_request == 10


async def test_reclassify_refused_once_balances_exist(
    db_session: AsyncSession, vacation_type: LeaveTypeResponse
) -> None:
    leave_type = await get_leave_type(db_session, vacation_type.id)
    await ensure_balance(db_session, EMPLOYEE_ID, leave_type, 6)
    await db_session.commit()

    with pytest.raises(ReclassificationError):
        await update_leave_type(
            db_session, ADMIN, vacation_type.id, UpdateLeaveTypeRequest(accrual_basis=AccrualBasis.FIXED)
        )

    unchanged = await get_leave_type_response(db_session, vacation_type.id)
    assert unchanged.accrual_basis == AccrualBasis.SENIORITY

    # Restating the current value is not a reclassification.
    same = await update_leave_type(
        db_session,
        ADMIN,
        vacation_type.id,
        UpdateLeaveTypeRequest(classification=LeaveClassification.ANNUAL, max_days_per_request=12),
    )
    assert same.max_days_per_request == 12


async def test_reclassify_allowed_without_balances(db_session: AsyncSession) -> None:
    created = await make_leave_type(db_session, "Permiso Especial", event_entitled_days=4)
    assert created.event_entitled_days is None

    updated = await update_leave_type(
        db_session,
        ADMIN,
        created.id,
        UpdateLeaveTypeRequest(classification=LeaveClassification.EVENT_REPEATABLE, event_entitled_days=4),
    )
    assert updated.classification == LeaveClassification.EVENT_REPEATABLE
    assert updated.event_entitled_days == 4


async def test_list_and_missing(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    matrimonio_type: LeaveTypeResponse,
) -> None:
    listed = await list_leave_types(db_session)
    assert [lt.name for lt in listed.items] == ["Matrimonio", "Vacaciones Ordinarias"]

    with pytest.raises(NotFoundError):
        await get_leave_type_response(db_session, uuid.uuid4())


async def test_http_leave_types(async_client: AsyncClient) -> None:
    body = {"name": "Matrimonio", "max_days_per_request": 5}

    response = await async_client.post("/leave-types", json=body, headers=EMPLOYEE_HEADERS)
    assert response.status_code == 403

    response = await async_client.post("/leave-types", json=body, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    data = response.json()
    assert data["classification"] == "ONE_TIME"
    assert data["event_entitled_days"] == 5

    response = await async_client.get(f"/leave-types/{data['id']}", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200

    response = await async_client.put(
        f"/leave-types/{data['id']}", json={"color_code": "not-a-color"}, headers=ADMIN_HEADERS
    )
    assert response.status_code == 422

    response = await async_client.get(f"/leave-types/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"
