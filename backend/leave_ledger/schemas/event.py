# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel


class EventResponse(BaseModel):
    """A registered life event backing an event-based balance."""

    id: uuid.UUID
    employee_id: str
    leave_type_id: uuid.UUID
    event_date: date
    description: str | None
    created_at: datetime


class EventListResponse(BaseModel):
    items: list[EventResponse]
    total: int
