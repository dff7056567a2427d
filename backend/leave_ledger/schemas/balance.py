# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Day counts for one employee, leave type and service year."""

    id: uuid.UUID
    leave_type_id: uuid.UUID
    leave_type_name: str
    anniversary_year: int
    applicable_year: int | None
    entitled_days: int
    used_days: int
    pending_days: int
    available_days: int
    period_start: date
    period_end: date
    expires_at: date | None
    is_event_based: bool
    event_id: uuid.UUID | None
    version: int


class BalanceListResponse(BaseModel):
    """All balances for an employee."""

    employee_id: str
    items: list[BalanceResponse]
    total: int
