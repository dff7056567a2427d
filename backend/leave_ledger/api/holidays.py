# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.holiday import (
    CreateHolidayRequest,
    HolidayListResponse,
    HolidayResponse,
    WorkingDaysResponse,
)
from leave_ledger.services import duration as duration_service
from leave_ledger.services import holiday as holiday_service

holidays_router = APIRouter(prefix="/holidays", tags=["holidays"])


@holidays_router.post(
    "",
    response_model=HolidayResponse,
    status_code=201,
)
async def create_holiday(
    payload: CreateHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> HolidayResponse:
    """Register a holiday (admin only)."""
    return await holiday_service.create_holiday(session, auth, payload)


@holidays_router.get(
    "",
    response_model=HolidayListResponse,
)
async def list_holidays(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> HolidayListResponse:
    """List holidays with optional year filter."""
    return await holiday_service.list_holidays(session, year, offset, limit)


@holidays_router.get(
    "/working-days",
    response_model=WorkingDaysResponse,
)
async def working_days(
    session: SessionDep,
    auth: AuthDep,
    start_date: date = Query(),
    end_date: date = Query(),
) -> WorkingDaysResponse:
    """Count working, rest and holiday days in an inclusive date range."""
    details = await duration_service.day_details(session, start_date, end_date)
    return WorkingDaysResponse(
        start_date=start_date,
        end_date=end_date,
        calendar_days=details.calendar_days,
        working_days=details.working_days,
        rest_days=details.rest_days,
        holidays=details.holidays,
    )


@holidays_router.delete(
    "/{holiday_id}",
    status_code=204,
)
async def delete_holiday(
    holiday_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Delete a holiday (admin only)."""
    await holiday_service.delete_holiday(session, auth, holiday_id)
