# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AuthDep, ensure_self_or_admin
from leave_ledger.db import SessionDep
from leave_ledger.schemas.event import EventListResponse
from leave_ledger.services import event as event_service

employee_events_router = APIRouter(
    prefix="/employees/{employee_id}/events",
    tags=["events"],
)


@employee_events_router.get("", response_model=EventListResponse)
async def list_employee_events(
    employee_id: str,
    session: SessionDep,
    auth: AuthDep,
    leave_type_id: uuid.UUID | None = Query(default=None),
) -> EventListResponse:
    """List the life events registered for an employee."""
    ensure_self_or_admin(auth, employee_id)
    return await event_service.list_events(session, employee_id, leave_type_id)
