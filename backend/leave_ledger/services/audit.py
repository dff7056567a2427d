"""Audit trail: every ledger mutation is recorded in the caller's transaction."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.models.audit import AuditLog
from leave_ledger.schemas.audit import AuditLogEntryResponse, AuditLogListResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from leave_ledger.models.enums import AuditAction, AuditEntityType

# Actor recorded for mutations made by the scheduler rather than a user.
SYSTEM_ACTOR = "SYSTEM"


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Serialize a SQLModel row to a JSON-safe dict (UUIDs and dates as strings)."""
    data: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        else:
            data[key] = value
    return data


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: str,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry; it commits or rolls back with the mutation it describes."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def query_audit_log(
    session: AsyncSession,
    *,
    entity_type: AuditEntityType | None = None,
    entity_id: uuid.UUID | None = None,
    action: AuditAction | None = None,
    actor_id: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """List audit entries, newest first, with optional filters."""
    filters = []
    if entity_type is not None:
        filters.append(col(AuditLog.entity_type) == entity_type.value)
    if entity_id is not None:
        filters.append(col(AuditLog.entity_id) == entity_id)
    if action is not None:
        filters.append(col(AuditLog.action) == action.value)
    if actor_id is not None:
        filters.append(col(AuditLog.actor_id) == actor_id)

    count_result = await session.execute(select(func.count()).select_from(AuditLog).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AuditLog).where(*filters).order_by(col(AuditLog.created_at).desc()).offset(offset).limit(limit)
    )
    return AuditLogListResponse(
        items=[
            AuditLogEntryResponse(
                id=e.id,
                actor_id=e.actor_id,
                entity_type=e.entity_type,
                entity_id=e.entity_id,
                action=e.action,
                before_json=e.before_json,
                after_json=e.after_json,
                created_at=e.created_at,
            )
            for e in result.scalars().all()
        ],
        total=total,
    )
