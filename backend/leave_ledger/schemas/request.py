# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_ledger.models.enums import RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitRequestPayload(BaseModel):
    """Request body for submitting a new leave request.

    ``anniversary_year`` pins an annual request to a specific service year.
    ``event_date`` defaults to ``start_date`` for event-based leave types.
    """

    employee_id: str = Field(min_length=1, max_length=20)
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    anniversary_year: int | None = Field(default=None, ge=0)
    event_date: date | None = None
    event_description: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must be on or after start_date"
            raise ValueError(msg)
        return self


class TransitionPayload(BaseModel):
    """Request body for a generic status change."""

    status: RequestStatus
    rejection_reason: str | None = Field(default=None, max_length=1000)


class RejectPayload(BaseModel):
    """Request body for the reject action."""

    rejection_reason: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: str
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    requested_days: int
    status: RequestStatus
    anniversary_year: int | None
    balance_id: uuid.UUID | None
    event_id: uuid.UUID | None
    notes: str | None
    balance_at_request: int | None
    rejection_reason: str | None
    decided_by: str | None
    decided_at: datetime | None
    created_at: datetime


class RequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[RequestResponse]
    total: int
