from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import AppError, NotFoundError, ReclassificationError
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import AccrualBasis, AuditAction, AuditEntityType, LeaveClassification
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.schemas.leave_type import LeaveTypeListResponse, LeaveTypeResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log
from leave_ledger.services.classification import is_event_based, resolve_policy

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.leave_type import CreateLeaveTypeRequest, UpdateLeaveTypeRequest

logger = logging.getLogger(__name__)

_NON_NULLABLE_FIELDS = frozenset(
    {"is_paid", "requires_approval", "min_notice_days", "color_code", "classification", "accrual_basis"}
)


def _build_leave_type_response(leave_type: LeaveType) -> LeaveTypeResponse:
    return LeaveTypeResponse(
        id=leave_type.id,
        name=leave_type.name,
        description=leave_type.description,
        is_paid=leave_type.is_paid,
        requires_approval=leave_type.requires_approval,
        max_days_per_year=leave_type.max_days_per_year,
        max_days_per_request=leave_type.max_days_per_request,
        min_notice_days=leave_type.min_notice_days,
        color_code=leave_type.color_code,
        classification=LeaveClassification(leave_type.classification),
        accrual_basis=AccrualBasis(leave_type.accrual_basis),
        event_entitled_days=leave_type.event_entitled_days,
        created_at=leave_type.created_at,
    )


async def get_leave_type(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    """Fetch a leave type by ID. Raises 404 if not found."""
    result = await session.execute(select(LeaveType).where(col(LeaveType.id) == leave_type_id))
    leave_type = result.scalar_one_or_none()
    if leave_type is None:
        msg = f"Leave type {leave_type_id} not found"
        raise NotFoundError(msg)
    return leave_type


async def _has_balances(session: AsyncSession, leave_type_id: uuid.UUID) -> bool:
    result = await session.execute(
        select(col(LeaveBalance.id)).where(col(LeaveBalance.leave_type_id) == leave_type_id).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def create_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Configure a new leave type.

    Classification, accrual basis and default day allowances are resolved
    here, once, from the name unless the payload sets them explicitly.
    """
    policy = resolve_policy(payload.name)
    classification = payload.classification or policy.classification
    accrual_basis = payload.accrual_basis or policy.accrual_basis

    event_days = payload.event_entitled_days
    if is_event_based(classification):
        if event_days is None:
            event_days = policy.event_entitled_days
    else:
        event_days = None

    yearly_cap = payload.max_days_per_year
    if yearly_cap is None and classification == LeaveClassification.ANNUAL and accrual_basis == AccrualBasis.FIXED:
        yearly_cap = policy.annual_entitled_days

    leave_type = LeaveType(
        name=payload.name,
        description=payload.description,
        is_paid=payload.is_paid,
        requires_approval=payload.requires_approval,
        max_days_per_year=yearly_cap,
        max_days_per_request=payload.max_days_per_request,
        min_notice_days=payload.min_notice_days,
        color_code=payload.color_code,
        classification=classification.value,
        accrual_basis=accrual_basis.value,
        event_entitled_days=event_days,
    )
    session.add(leave_type)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError(f"Leave type '{payload.name}' already exists", status_code=409) from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    logger.info("Configured leave type %s as %s/%s", leave_type.name, classification, accrual_basis)
    return _build_leave_type_response(leave_type)


async def update_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Apply a partial update.

    Changing classification or accrual basis is refused once balances exist.
    """
    leave_type = await get_leave_type(session, leave_type_id)
    changes = payload.model_dump(exclude_unset=True)

    reclassifies = (
        changes.get("classification") not in (None, leave_type.classification)
        or changes.get("accrual_basis") not in (None, leave_type.accrual_basis)
    )
    if reclassifies and await _has_balances(session, leave_type.id):
        msg = f"Leave type '{leave_type.name}' already has balances and cannot be reclassified"
        raise ReclassificationError(msg)

    before_dict = model_to_audit_dict(leave_type)
    for key, value in changes.items():
        if value is None and key in _NON_NULLABLE_FIELDS:
            continue
        setattr(leave_type, key, value.value if isinstance(value, (LeaveClassification, AccrualBasis)) else value)

    if not is_event_based(LeaveClassification(leave_type.classification)):
        leave_type.event_entitled_days = None

    await session.flush()
    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)


async def get_leave_type_response(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveTypeResponse:
    return _build_leave_type_response(await get_leave_type(session, leave_type_id))


async def list_leave_types(session: AsyncSession) -> LeaveTypeListResponse:
    """List all leave types ordered by name."""
    result = await session.execute(select(LeaveType).order_by(col(LeaveType.name)))
    leave_types = list(result.scalars().all())
    return LeaveTypeListResponse(
        items=[_build_leave_type_response(lt) for lt in leave_types],
        total=len(leave_types),
    )
