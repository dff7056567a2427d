"""Event registry: life events backing one-time and repeatable leave."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import BenefitExhaustedError, LedgerIntegrityFault, NotFoundError
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.models.event import LeaveEvent
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.event import EventListResponse, EventResponse
from leave_ledger.services.audit import SYSTEM_ACTOR, model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession


def _build_event_response(event: LeaveEvent) -> EventResponse:
    return EventResponse(
        id=event.id,
        employee_id=event.employee_id,
        leave_type_id=event.leave_type_id,
        event_date=event.event_date,
        description=event.description,
        created_at=event.created_at,
    )


async def _find_event(
    session: AsyncSession,
    employee_id: str,
    leave_type_id: uuid.UUID,
    event_date: date,
) -> LeaveEvent | None:
    result = await session.execute(
        select(LeaveEvent).where(
            col(LeaveEvent.employee_id) == employee_id,
            col(LeaveEvent.leave_type_id) == leave_type_id,
            col(LeaveEvent.event_date) == event_date,
        )
    )
    return result.scalar_one_or_none()


async def has_used_one_time_benefit(session: AsyncSession, employee_id: str, leave_type_id: uuid.UUID) -> bool:
    """True when the employee holds an un-revoked event for this leave type."""
    result = await session.execute(
        select(col(LeaveEvent.id))
        .where(
            col(LeaveEvent.employee_id) == employee_id,
            col(LeaveEvent.leave_type_id) == leave_type_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def register_event(
    session: AsyncSession,
    employee_id: str,
    leave_type_id: uuid.UUID,
    event_date: date,
    description: str | None = None,
    *,
    one_time: bool = False,
    actor_id: str = SYSTEM_ACTOR,
) -> LeaveEvent:
    """Record a life event. Registering the same date twice returns the first event.

    With ``one_time`` the event claims the employee's single use of the
    benefit; any existing or concurrently inserted claim raises
    ``BenefitExhaustedError``. Runs inside the caller's transaction; the
    caller commits.
    """
    existing = await _find_event(session, employee_id, leave_type_id, event_date)
    if existing is not None:
        if one_time:
            msg = f"Employee {employee_id} has already claimed this one-time leave"
            raise BenefitExhaustedError(msg)
        return existing

    event = LeaveEvent(
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        event_date=event_date,
        description=description,
        is_one_time=one_time,
    )
    try:
        async with session.begin_nested():
            session.add(event)
            await session.flush()
    except IntegrityError:
        if one_time:
            msg = f"Employee {employee_id} has already claimed this one-time leave"
            raise BenefitExhaustedError(msg) from None
        winner = await _find_event(session, employee_id, leave_type_id, event_date)
        if winner is None:
            msg = f"Event for {employee_id} on {event_date} conflicted on insert but cannot be read back"
            raise LedgerIntegrityFault(msg) from None
        return winner

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.EVENT,
        entity_id=event.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(event),
    )
    return event


async def revoke_event(session: AsyncSession, event_id: uuid.UUID, *, actor_id: str = SYSTEM_ACTOR) -> None:
    """Delete an event so a one-time benefit can be claimed again.

    Balances and requests that reference the event are detached first.
    Runs inside the caller's transaction; the caller commits.
    """
    result = await session.execute(select(LeaveEvent).where(col(LeaveEvent.id) == event_id))
    event = result.scalar_one_or_none()
    if event is None:
        msg = f"Event {event_id} not found"
        raise NotFoundError(msg)

    await session.execute(update(LeaveBalance).where(col(LeaveBalance.event_id) == event_id).values(event_id=None))
    await session.execute(update(LeaveRequest).where(col(LeaveRequest.event_id) == event_id).values(event_id=None))

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.EVENT,
        entity_id=event.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(event),
    )
    await session.delete(event)
    await session.flush()


async def list_events(
    session: AsyncSession,
    employee_id: str,
    leave_type_id: uuid.UUID | None = None,
) -> EventListResponse:
    """List an employee's registered events, newest first."""
    query = select(LeaveEvent).where(col(LeaveEvent.employee_id) == employee_id)
    if leave_type_id is not None:
        query = query.where(col(LeaveEvent.leave_type_id) == leave_type_id)
    result = await session.execute(query.order_by(col(LeaveEvent.event_date).desc()))
    events = list(result.scalars().all())
    return EventListResponse(items=[_build_event_response(e) for e in events], total=len(events))
