# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from leave_ledger.models.enums import AccrualBasis, LeaveClassification

_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CreateLeaveTypeRequest(BaseModel):
    """Request body for configuring a new leave type.

    ``classification``, ``accrual_basis`` and ``event_entitled_days`` are
    resolved from the name when omitted.
    """

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    is_paid: bool = True
    requires_approval: bool = True
    max_days_per_year: int | None = Field(default=None, gt=0)
    max_days_per_request: int | None = Field(default=None, gt=0)
    min_notice_days: int = Field(default=0, ge=0)
    color_code: str = Field(default="#4CAF50", pattern=_COLOR_PATTERN)
    classification: LeaveClassification | None = None
    accrual_basis: AccrualBasis | None = None
    event_entitled_days: int | None = Field(default=None, gt=0)


class UpdateLeaveTypeRequest(BaseModel):
    """Partial update; only fields that are set are applied."""

    description: str | None = None
    is_paid: bool | None = None
    requires_approval: bool | None = None
    max_days_per_year: int | None = Field(default=None, gt=0)
    max_days_per_request: int | None = Field(default=None, gt=0)
    min_notice_days: int | None = Field(default=None, ge=0)
    color_code: str | None = Field(default=None, pattern=_COLOR_PATTERN)
    classification: LeaveClassification | None = None
    accrual_basis: AccrualBasis | None = None
    event_entitled_days: int | None = Field(default=None, gt=0)


class LeaveTypeResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    is_paid: bool
    requires_approval: bool
    max_days_per_year: int | None
    max_days_per_request: int | None
    min_notice_days: int
    color_code: str
    classification: LeaveClassification
    accrual_basis: AccrualBasis
    event_entitled_days: int | None
    created_at: datetime


class LeaveTypeListResponse(BaseModel):
    items: list[LeaveTypeResponse]
    total: int
