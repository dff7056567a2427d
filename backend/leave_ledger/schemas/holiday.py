# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from leave_ledger.models.enums import HolidayType


class CreateHolidayRequest(BaseModel):
    """Request body for registering a holiday."""

    holiday_date: date
    description: str = Field(min_length=1, max_length=255)
    type: HolidayType = HolidayType.OFFICIAL
    full_day: bool = True


class HolidayResponse(BaseModel):
    id: uuid.UUID
    holiday_date: date
    description: str
    type: HolidayType
    full_day: bool


class HolidayListResponse(BaseModel):
    """Paginated list of holidays."""

    items: list[HolidayResponse]
    total: int


class WorkingDaysResponse(BaseModel):
    """Breakdown of a date range into working, rest and holiday days."""

    start_date: date
    end_date: date
    calendar_days: int
    working_days: int
    rest_days: int
    holidays: int
