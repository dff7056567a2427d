# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AdminDep, AuthDep, ensure_self_or_admin
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import RequestStatus
from leave_ledger.schemas.request import (
    RejectPayload,
    RequestListResponse,
    RequestResponse,
    SubmitRequestPayload,
    TransitionPayload,
)
from leave_ledger.services import request as request_service

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Submit a new leave request."""
    return await request_service.submit_request(session, auth, payload)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    leave_type_id: uuid.UUID | None = Query(default=None),
    employee_id: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List leave requests. Non-admins only see their own."""
    if not auth.is_admin:
        employee_id = auth.user_id
    return await request_service.list_requests(session, status_filter, leave_type_id, employee_id, offset, limit)


@requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Get a single leave request. Non-admins may only read their own."""
    leave_request = await request_service.get_request(session, request_id)
    ensure_self_or_admin(auth, leave_request.employee_id)
    return leave_request


@requests_router.post("/{request_id}/transition", response_model=RequestResponse)
async def transition_request(
    request_id: uuid.UUID,
    payload: TransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Move a request to another status."""
    return await request_service.transition_request(
        session, auth, request_id, payload.status, payload.rejection_reason
    )


@requests_router.post("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> RequestResponse:
    """Approve a pending leave request (admin only)."""
    return await request_service.approve_request(session, auth, request_id)


@requests_router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    payload: RejectPayload,
    session: SessionDep,
    auth: AdminDep,
) -> RequestResponse:
    """Reject a pending leave request with a reason (admin only)."""
    return await request_service.reject_request(session, auth, request_id, payload.rejection_reason)


@requests_router.post("/{request_id}/cancel", response_model=RequestResponse)
async def cancel_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Cancel a pending or approved leave request."""
    return await request_service.cancel_request(session, auth, request_id)
