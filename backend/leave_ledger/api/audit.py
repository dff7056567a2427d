# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AdminDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.schemas.audit import AuditLogListResponse
from leave_ledger.services import audit as audit_service

audit_router = APIRouter(prefix="/audit-log", tags=["audit"])


@audit_router.get("", response_model=AuditLogListResponse)
async def query_audit_log(
    session: SessionDep,
    auth: AdminDep,
    entity_type: AuditEntityType | None = Query(default=None),
    entity_id: uuid.UUID | None = Query(default=None),
    action: AuditAction | None = Query(default=None),
    actor_id: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Query the audit trail (admin only)."""
    return await audit_service.query_audit_log(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        offset=offset,
        limit=limit,
    )
