from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import LedgerIntegrityFault, NotFoundError
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import AuditAction, AuditEntityType, BalanceField
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.balance import BalanceListResponse, BalanceResponse
from leave_ledger.services.accrual import compute_entitlement
from leave_ledger.services.audit import SYSTEM_ACTOR, model_to_audit_dict, write_audit_log
from leave_ledger.services.employee import get_hire_date
from leave_ledger.services.notification import balance_assigned, queue_notification

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: LeaveBalance, leave_type_name: str) -> BalanceResponse:
    """Map a balance model to its response schema."""
    return BalanceResponse(
        id=balance.id,
        leave_type_id=balance.leave_type_id,
        leave_type_name=leave_type_name,
        anniversary_year=balance.anniversary_year,
        applicable_year=balance.applicable_year,
        entitled_days=balance.entitled_days,
        used_days=balance.used_days,
        pending_days=balance.pending_days,
        available_days=balance.available_days,
        period_start=balance.period_start,
        period_end=balance.period_end,
        expires_at=balance.expires_at,
        is_event_based=balance.is_event_based,
        event_id=balance.event_id,
        version=balance.version,
    )


async def find_balance(
    session: AsyncSession,
    employee_id: str,
    leave_type_id: uuid.UUID,
    anniversary_year: int,
    *,
    for_update: bool = False,
) -> LeaveBalance | None:
    """Look up the balance row for its natural key."""
    query = select(LeaveBalance).where(
        col(LeaveBalance.employee_id) == employee_id,
        col(LeaveBalance.leave_type_id) == leave_type_id,
        col(LeaveBalance.anniversary_year) == anniversary_year,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


async def ensure_balance(
    session: AsyncSession,
    employee_id: str,
    leave_type: LeaveType,
    anniversary_year: int,
    *,
    hire_date: date | None = None,
    actor_id: str = SYSTEM_ACTOR,
) -> tuple[LeaveBalance, bool]:
    """Return the annual balance for a service year, creating it if absent.

    Returns ``(balance, created)``. An existing row is returned unchanged.
    The insert runs in a SAVEPOINT so a concurrent creator hitting the
    unique key leaves the outer transaction intact; the winner's row is
    then re-read. The caller commits, and dispatches the queued
    "balance assigned" notification afterwards.
    """
    existing = await find_balance(session, employee_id, leave_type.id, anniversary_year)
    if existing is not None:
        return existing, False

    if hire_date is None:
        hire_date = await get_hire_date(employee_id)
        if hire_date is None:
            msg = f"Employee {employee_id} not found"
            raise NotFoundError(msg)

    entitlement = compute_entitlement(leave_type, hire_date, anniversary_year)
    balance = LeaveBalance(
        employee_id=employee_id,
        leave_type_id=leave_type.id,
        anniversary_year=anniversary_year,
        applicable_year=entitlement.period_start.year,
        period_start=entitlement.period_start,
        period_end=entitlement.period_end,
        entitled_days=entitlement.entitled_days,
        is_event_based=False,
    )

    try:
        async with session.begin_nested():
            session.add(balance)
            await session.flush()
    except IntegrityError:
        winner = await find_balance(session, employee_id, leave_type.id, anniversary_year)
        if winner is None:
            msg = (
                f"Balance for {employee_id}/{leave_type.name}/year {anniversary_year} "
                "conflicted on insert but cannot be read back"
            )
            raise LedgerIntegrityFault(msg) from None
        return winner, False

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.BALANCE,
        entity_id=balance.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(balance),
    )
    queue_notification(
        session,
        balance_assigned(
            employee_id,
            leave_type.name,
            balance.entitled_days,
            balance.period_start,
            balance.period_end,
        ),
    )
    logger.debug(
        "Created balance employee=%s leave_type=%s year=%d entitled=%d",
        employee_id,
        leave_type.name,
        anniversary_year,
        balance.entitled_days,
    )
    return balance, True


async def get_balance_for_update(session: AsyncSession, balance_id: uuid.UUID | None) -> LeaveBalance:
    """Lock a balance row with SELECT FOR UPDATE.

    A missing row is a ledger fault, never silently recreated.
    """
    if balance_id is None:
        msg = "Request is not linked to a balance"
        raise LedgerIntegrityFault(msg)
    result = await session.execute(select(LeaveBalance).where(col(LeaveBalance.id) == balance_id).with_for_update())
    balance = result.scalar_one_or_none()
    if balance is None:
        msg = f"Balance {balance_id} is missing"
        raise LedgerIntegrityFault(msg)
    return balance


def adjust_balance(balance: LeaveBalance, field: BalanceField, delta: int) -> LeaveBalance:
    """Add ``delta`` to ``pending_days`` or ``used_days``.

    A result below zero is rejected, not clamped.
    """
    current: int = getattr(balance, field.value)
    updated = current + delta
    if updated < 0:
        msg = f"Balance {balance.id} {field.value} would become {updated} (current {current}, delta {delta})"
        raise LedgerIntegrityFault(msg)
    setattr(balance, field.value, updated)
    balance.version += 1
    return balance


async def delete_balance(session: AsyncSession, balance: LeaveBalance, *, actor_id: str = SYSTEM_ACTOR) -> None:
    """Delete an event-based balance, detaching any request that points at it."""
    if not balance.is_event_based:
        msg = f"Refusing to delete annual balance {balance.id}"
        raise LedgerIntegrityFault(msg)

    await session.execute(
        update(LeaveRequest).where(col(LeaveRequest.balance_id) == balance.id).values(balance_id=None)
    )
    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.BALANCE,
        entity_id=balance.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(balance),
    )
    await session.delete(balance)
    await session.flush()


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_employee_balances(
    session: AsyncSession,
    employee_id: str,
    on: date | None = None,
) -> BalanceListResponse:
    """List an employee's balances, optionally only those whose period contains ``on``."""
    query = (
        select(LeaveBalance, col(LeaveType.name))
        .join(LeaveType, col(LeaveType.id) == col(LeaveBalance.leave_type_id))
        .where(col(LeaveBalance.employee_id) == employee_id)
    )
    if on is not None:
        query = query.where(col(LeaveBalance.period_start) <= on, col(LeaveBalance.period_end) >= on)
    query = query.order_by(col(LeaveType.name), col(LeaveBalance.anniversary_year))

    result = await session.execute(query)
    items = [_build_balance_response(balance, name) for balance, name in result.all()]
    return BalanceListResponse(employee_id=employee_id, items=items, total=len(items))
