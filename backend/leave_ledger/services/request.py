# ruff: noqa: TC003
"""Leave request lifecycle and its effect on balances.

Each status change is looked up in ``_TRANSITION_POLICIES`` by ledger kind
(annual or event-based) and edge; the matching policy says how the linked
balance moves and whether a one-time event is revoked.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import (
    AppError,
    BenefitExhaustedError,
    ConcurrencyConflictError,
    DuplicateRequestError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidInputError,
    InvalidTransitionError,
    LedgerIntegrityFault,
    MissingRejectionReasonError,
    NotFoundError,
)
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import (
    AuditAction,
    AuditEntityType,
    BalanceField,
    LeaveClassification,
    RequestStatus,
)
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.request import RequestListResponse, RequestResponse
from leave_ledger.services.accrual import (
    anniversary_year_for,
    compute_event_entitlement,
    latest_materializable_year,
)
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log
from leave_ledger.services.balance import (
    adjust_balance,
    delete_balance,
    ensure_balance,
    find_balance,
    get_balance_for_update,
)
from leave_ledger.services.classification import classification_of, is_event_based
from leave_ledger.services.duration import count_working_days
from leave_ledger.services.employee import get_employee_directory
from leave_ledger.services.event import has_used_one_time_benefit, register_event, revoke_event
from leave_ledger.services.leave_type import get_leave_type
from leave_ledger.services.notification import (
    discard_notifications,
    dispatch_notifications,
    event_registered,
    queue_notification,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.leave_type import LeaveType
    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.request import SubmitRequestPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transition policy table
# ---------------------------------------------------------------------------


class LedgerKind(StrEnum):
    ANNUAL = "ANNUAL"
    EVENT = "EVENT"


BalanceEffect = Callable[["AsyncSession", LeaveRequest, LeaveBalance, str], Awaitable[None]]


async def _annual_approve(session: AsyncSession, request: LeaveRequest, balance: LeaveBalance, actor: str) -> None:
    adjust_balance(balance, BalanceField.PENDING, -request.requested_days)
    adjust_balance(balance, BalanceField.USED, request.requested_days)


async def _annual_release_pending(
    session: AsyncSession, request: LeaveRequest, balance: LeaveBalance, actor: str
) -> None:
    adjust_balance(balance, BalanceField.PENDING, -request.requested_days)


async def _annual_release_used(session: AsyncSession, request: LeaveRequest, balance: LeaveBalance, actor: str) -> None:
    adjust_balance(balance, BalanceField.USED, -request.requested_days)


async def _event_approve(session: AsyncSession, request: LeaveRequest, balance: LeaveBalance, actor: str) -> None:
    adjust_balance(balance, BalanceField.PENDING, -balance.pending_days)
    adjust_balance(balance, BalanceField.USED, balance.entitled_days - balance.used_days)


async def _event_discard(session: AsyncSession, request: LeaveRequest, balance: LeaveBalance, actor: str) -> None:
    request.balance_id = None
    await delete_balance(session, balance, actor_id=actor)


async def _event_release_used(session: AsyncSession, request: LeaveRequest, balance: LeaveBalance, actor: str) -> None:
    adjust_balance(balance, BalanceField.USED, -balance.used_days)
    adjust_balance(balance, BalanceField.PENDING, -balance.pending_days)


@dataclass(frozen=True)
class TransitionPolicy:
    """Ledger consequences of one status edge for one kind of leave."""

    effect: BalanceEffect
    revokes_one_time_event: bool = False


_TRANSITION_POLICIES: dict[tuple[LedgerKind, RequestStatus, RequestStatus], TransitionPolicy] = {
    (LedgerKind.ANNUAL, RequestStatus.PENDING, RequestStatus.APPROVED): TransitionPolicy(_annual_approve),
    (LedgerKind.ANNUAL, RequestStatus.PENDING, RequestStatus.REJECTED): TransitionPolicy(_annual_release_pending),
    (LedgerKind.ANNUAL, RequestStatus.PENDING, RequestStatus.CANCELLED): TransitionPolicy(_annual_release_pending),
    (LedgerKind.ANNUAL, RequestStatus.APPROVED, RequestStatus.CANCELLED): TransitionPolicy(_annual_release_used),
    (LedgerKind.EVENT, RequestStatus.PENDING, RequestStatus.APPROVED): TransitionPolicy(_event_approve),
    (LedgerKind.EVENT, RequestStatus.PENDING, RequestStatus.REJECTED): TransitionPolicy(
        _event_discard, revokes_one_time_event=True
    ),
    (LedgerKind.EVENT, RequestStatus.PENDING, RequestStatus.CANCELLED): TransitionPolicy(
        _event_discard, revokes_one_time_event=True
    ),
    (LedgerKind.EVENT, RequestStatus.APPROVED, RequestStatus.CANCELLED): TransitionPolicy(
        _event_release_used, revokes_one_time_event=True
    ),
}

_AUDIT_ACTIONS = {
    RequestStatus.APPROVED: AuditAction.APPROVE,
    RequestStatus.REJECTED: AuditAction.REJECT,
    RequestStatus.CANCELLED: AuditAction.CANCEL,
}


_ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.CANCELLED}),
}


def allowed_transitions(current: RequestStatus) -> frozenset[RequestStatus]:
    """Statuses reachable from ``current`` in one step."""
    return _ALLOWED_TRANSITIONS.get(current, frozenset())


def _ledger_kind(classification: LeaveClassification) -> LedgerKind:
    return LedgerKind.EVENT if is_event_based(classification) else LedgerKind.ANNUAL


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: LeaveRequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        leave_type_id=request.leave_type_id,
        start_date=request.start_date,
        end_date=request.end_date,
        requested_days=request.requested_days,
        status=RequestStatus(request.status),
        anniversary_year=request.anniversary_year,
        balance_id=request.balance_id,
        event_id=request.event_id,
        notes=request.notes,
        balance_at_request=request.balance_at_request,
        rejection_reason=request.rejection_reason,
        decided_by=request.decided_by,
        decided_at=request.decided_at,
        created_at=request.created_at,
    )


async def _get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    result = await session.execute(select(LeaveRequest).where(col(LeaveRequest.id) == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        msg = f"Request {request_id} not found"
        raise NotFoundError(msg)
    return request


async def _validate_submission(
    session: AsyncSession,
    payload: SubmitRequestPayload,
    leave_type: LeaveType,
    today: date,
) -> tuple[date, int]:
    """Check everything that does not touch the ledger.

    Returns the employee's hire date and the number of working days requested.
    """
    if not payload.employee_id.strip():
        raise InvalidInputError("employee_id must not be blank")
    if payload.end_date < payload.start_date:
        raise InvalidInputError("end_date must be on or after start_date")

    employee = await get_employee_directory().get_employee(payload.employee_id)
    if employee is None:
        msg = f"Employee {payload.employee_id} not found"
        raise NotFoundError(msg)
    if not employee.is_active:
        msg = f"Employee {payload.employee_id} is inactive"
        raise InvalidInputError(msg)

    requested_days = await count_working_days(session, payload.start_date, payload.end_date)
    if requested_days <= 0:
        raise InvalidInputError("The requested period contains no working days")

    if leave_type.max_days_per_request is not None and requested_days > leave_type.max_days_per_request:
        msg = (
            f"{leave_type.name} allows at most {leave_type.max_days_per_request} days per request, "
            f"{requested_days} requested"
        )
        raise InvalidInputError(msg)

    # min_notice_days == 0 permits backdated requests.
    if leave_type.min_notice_days > 0 and (payload.start_date - today).days < leave_type.min_notice_days:
        msg = f"{leave_type.name} requires at least {leave_type.min_notice_days} days of notice"
        raise InvalidInputError(msg)

    if payload.anniversary_year is not None and not is_event_based(classification_of(leave_type)):
        latest = latest_materializable_year(employee.hire_date, today)
        if latest is None or payload.anniversary_year > latest:
            msg = f"Employee {payload.employee_id} has not reached service year {payload.anniversary_year}"
            raise InvalidInputError(msg)

    return employee.hire_date, requested_days


async def _resolve_annual_balance(
    session: AsyncSession,
    employee_id: str,
    leave_type: LeaveType,
    hire_date: date,
    start_date: date,
    explicit_year: int | None,
    actor: str,
    today: date,
) -> LeaveBalance:
    """Pick the service-year balance an annual request draws from.

    Order: explicit year, the balance whose period contains the start date,
    the most recent balance, and finally the year derived from the hire
    date (materialized on demand, never past the latest year reached by
    ``today``). An explicit year has already been checked against ``today``.
    """
    if explicit_year is not None:
        balance, _ = await ensure_balance(
            session, employee_id, leave_type, explicit_year, hire_date=hire_date, actor_id=actor
        )
        return balance

    base = select(LeaveBalance).where(
        col(LeaveBalance.employee_id) == employee_id,
        col(LeaveBalance.leave_type_id) == leave_type.id,
        col(LeaveBalance.is_event_based).is_(False),
    )
    result = await session.execute(
        base.where(
            col(LeaveBalance.period_start) <= start_date,
            col(LeaveBalance.period_end) >= start_date,
        ).order_by(col(LeaveBalance.anniversary_year).desc())
    )
    balance = result.scalars().first()
    if balance is not None:
        return balance

    result = await session.execute(base.order_by(col(LeaveBalance.anniversary_year).desc()))
    balance = result.scalars().first()
    if balance is not None:
        return balance

    latest = latest_materializable_year(hire_date, today)
    if latest is None:
        msg = f"Employee {employee_id} has not completed the first service period"
        raise InsufficientBalanceError(msg)
    year = min(anniversary_year_for(hire_date, start_date), latest)
    balance, _ = await ensure_balance(session, employee_id, leave_type, year, hire_date=hire_date, actor_id=actor)
    return balance


async def _prepare_event_balance(
    session: AsyncSession,
    payload: SubmitRequestPayload,
    leave_type: LeaveType,
    classification: LeaveClassification,
    hire_date: date,
    actor: str,
) -> tuple[LeaveBalance, uuid.UUID]:
    """Register the event and create (or reuse) its balance with all days pending.

    Concurrent one-time claims are serialized by the event table's claim
    index; a lost race on the balance key is a retryable conflict.
    """
    if classification == LeaveClassification.ONE_TIME and await has_used_one_time_benefit(
        session, payload.employee_id, leave_type.id
    ):
        msg = f"Employee {payload.employee_id} has already used their {leave_type.name} leave"
        raise BenefitExhaustedError(msg)

    entitlement = compute_event_entitlement(leave_type, hire_date, payload.start_date, payload.end_date)
    balance = await find_balance(
        session, payload.employee_id, leave_type.id, entitlement.anniversary_year, for_update=True
    )
    if balance is not None and (balance.used_days > 0 or balance.pending_days > 0):
        msg = (
            f"Employee {payload.employee_id} already has an active {leave_type.name} balance "
            f"for service year {entitlement.anniversary_year}"
        )
        raise BenefitExhaustedError(msg)

    event = await register_event(
        session,
        payload.employee_id,
        leave_type.id,
        payload.event_date or payload.start_date,
        payload.event_description,
        one_time=classification == LeaveClassification.ONE_TIME,
        actor_id=actor,
    )

    if balance is None:
        balance = LeaveBalance(
            employee_id=payload.employee_id,
            leave_type_id=leave_type.id,
            anniversary_year=entitlement.anniversary_year,
            applicable_year=None,
            period_start=entitlement.period_start,
            period_end=entitlement.period_end,
            entitled_days=entitlement.entitled_days,
            is_event_based=True,
            event_id=event.id,
        )
        try:
            async with session.begin_nested():
                session.add(balance)
                await session.flush()
        except IntegrityError:
            msg = (
                f"A concurrent {leave_type.name} submission for {payload.employee_id} claimed service year "
                f"{entitlement.anniversary_year}; re-read and retry"
            )
            raise ConcurrencyConflictError(msg) from None
        await write_audit_log(
            session,
            actor_id=actor,
            entity_type=AuditEntityType.BALANCE,
            entity_id=balance.id,
            action=AuditAction.CREATE,
            after_json=model_to_audit_dict(balance),
        )
    else:
        balance.period_start = entitlement.period_start
        balance.period_end = entitlement.period_end
        balance.entitled_days = entitlement.entitled_days
        balance.is_event_based = True
        balance.applicable_year = None
        balance.event_id = event.id
        balance.version += 1

    adjust_balance(balance, BalanceField.PENDING, entitlement.entitled_days)
    queue_notification(
        session,
        event_registered(
            payload.employee_id,
            leave_type.name,
            entitlement.entitled_days,
            payload.start_date,
            payload.end_date,
        ),
    )
    return balance, event.id


async def _abort(session: AsyncSession) -> None:
    discard_notifications(session)
    await session.rollback()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitRequestPayload,
    *,
    today: date | None = None,
) -> RequestResponse:
    """Submit a leave request and reserve its days as pending.

    Flow:
    1. Authorize (own request, or admin on behalf of anyone)
    2. Validate dates, employee, working days, per-request cap and notice
    3. Annual: resolve and lock the service-year balance, check available days
       Event: check one-time exclusivity, register the event, create its balance
    4. Increase pending days
    5. Create request record (PENDING) linked to the balance
    6. Write audit log, commit, then send notifications
    """
    if today is None:
        today = date.today()
    actor = auth.user_id

    if payload.employee_id != auth.user_id and not auth.is_admin:
        raise ForbiddenError("Not authorized to submit requests for another employee")

    leave_type = await get_leave_type(session, payload.leave_type_id)
    hire_date, requested_days = await _validate_submission(session, payload, leave_type, today)
    classification = classification_of(leave_type)

    try:
        event_id: uuid.UUID | None = None
        if is_event_based(classification):
            balance, event_id = await _prepare_event_balance(
                session, payload, leave_type, classification, hire_date, actor
            )
            balance_at_request = 0
        else:
            balance = await _resolve_annual_balance(
                session,
                payload.employee_id,
                leave_type,
                hire_date,
                payload.start_date,
                payload.anniversary_year,
                actor,
                today,
            )
            balance = await get_balance_for_update(session, balance.id)
            if requested_days > balance.available_days:
                msg = (
                    f"Insufficient {leave_type.name} balance: {balance.available_days} days available, "
                    f"{requested_days} requested"
                )
                raise InsufficientBalanceError(msg)
            balance_at_request = balance.pending_days + balance.used_days
            adjust_balance(balance, BalanceField.PENDING, requested_days)

        leave_request = LeaveRequest(
            employee_id=payload.employee_id,
            leave_type_id=leave_type.id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            requested_days=requested_days,
            status=RequestStatus.PENDING.value,
            anniversary_year=balance.anniversary_year,
            balance_id=balance.id,
            event_id=event_id,
            notes=payload.notes,
            balance_at_request=balance_at_request,
        )
        session.add(leave_request)
        try:
            await session.flush()
        except IntegrityError:
            msg = (
                f"A {leave_type.name} request for {payload.employee_id} from {payload.start_date} "
                f"to {payload.end_date} already exists"
            )
            raise DuplicateRequestError(msg) from None
    except AppError:
        await _abort(session)
        raise

    await write_audit_log(
        session,
        actor_id=actor,
        entity_type=AuditEntityType.REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    await dispatch_notifications(session)
    logger.info(
        "Submitted %s request %s for %s: %d days",
        leave_type.name,
        leave_request.id,
        leave_request.employee_id,
        requested_days,
    )
    return _build_request_response(leave_request)


async def transition_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    new_status: RequestStatus,
    rejection_reason: str | None = None,
) -> RequestResponse:
    """Move a request to ``new_status`` and apply the ledger effect.

    1. Fetch request; validate the edge, the rejection reason and authorization
    2. Lock the linked balance (missing balance is a ledger fault)
    3. Conditionally update status (``WHERE status = :current``); no row
       updated means a concurrent transition won
    4. Apply the balance effect from the policy table
    5. Revoke the one-time event where the policy says so
    6. Audit log and commit
    """
    leave_request = await _get_request_or_404(session, request_id)
    current = RequestStatus(leave_request.status)

    if new_status not in allowed_transitions(current):
        msg = f"Cannot move request from {current} to {new_status}"
        raise InvalidTransitionError(msg)

    reason = rejection_reason.strip() if rejection_reason else None
    if new_status == RequestStatus.REJECTED and not reason:
        raise MissingRejectionReasonError("A rejection reason is required")

    if new_status == RequestStatus.CANCELLED:
        if auth.user_id != leave_request.employee_id and not auth.is_admin:
            raise ForbiddenError("Not authorized to cancel this request")
    elif not auth.is_admin:
        raise ForbiddenError("Admin access required")

    leave_type = await get_leave_type(session, leave_request.leave_type_id)
    classification = classification_of(leave_type)
    policy = _TRANSITION_POLICIES[(_ledger_kind(classification), current, new_status)]
    before_dict = model_to_audit_dict(leave_request)
    event_id = leave_request.event_id

    try:
        balance = await get_balance_for_update(session, leave_request.balance_id)
        snapshot = balance.pending_days + balance.used_days

        now = datetime.now(UTC)
        result = await session.execute(
            update(LeaveRequest)
            .where(col(LeaveRequest.id) == leave_request.id, col(LeaveRequest.status) == current.value)
            .values(
                status=new_status.value,
                rejection_reason=reason if new_status == RequestStatus.REJECTED else leave_request.rejection_reason,
                balance_at_request=snapshot,
                decided_by=auth.user_id,
                decided_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:  # ty: ignore[unresolved-attribute]
            msg = f"Request {leave_request.id} changed concurrently; re-read and retry"
            raise ConcurrencyConflictError(msg)
        await session.refresh(leave_request)

        await policy.effect(session, leave_request, balance, auth.user_id)

        if policy.revokes_one_time_event and classification == LeaveClassification.ONE_TIME and event_id is not None:
            await revoke_event(session, event_id, actor_id=auth.user_id)

        await session.flush()
    except AppError as exc:
        await _abort(session)
        if isinstance(exc, LedgerIntegrityFault):
            logger.error("Ledger fault on %s -> %s for request %s: %s", current, new_status, request_id, exc.message)
        raise

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=leave_request.id,
        action=_AUDIT_ACTIONS[new_status],
        before_json=before_dict,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    await dispatch_notifications(session)
    logger.info("Request %s moved %s -> %s by %s", leave_request.id, current, new_status, auth.user_id)
    return _build_request_response(leave_request)


async def approve_request(session: AsyncSession, auth: AuthContext, request_id: uuid.UUID) -> RequestResponse:
    """Approve a pending request: pending days become used days."""
    return await transition_request(session, auth, request_id, RequestStatus.APPROVED)


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    rejection_reason: str | None,
) -> RequestResponse:
    """Reject a pending request with a reason, releasing its pending days."""
    return await transition_request(session, auth, request_id, RequestStatus.REJECTED, rejection_reason)


async def cancel_request(session: AsyncSession, auth: AuthContext, request_id: uuid.UUID) -> RequestResponse:
    """Cancel a pending or approved request.

    The employee who submitted the request or an admin can cancel.
    """
    return await transition_request(session, auth, request_id, RequestStatus.CANCELLED)


async def get_request(session: AsyncSession, request_id: uuid.UUID) -> RequestResponse:
    """Get a single request by ID."""
    leave_request = await _get_request_or_404(session, request_id)
    return _build_request_response(leave_request)


async def list_requests(
    session: AsyncSession,
    status_filter: RequestStatus | None = None,
    leave_type_id: uuid.UUID | None = None,
    employee_id: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests with optional filters, ordered by created_at DESC."""
    base_filters = []
    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if leave_type_id is not None:
        base_filters.append(col(LeaveRequest.leave_type_id) == leave_type_id)
    if employee_id is not None:
        base_filters.append(col(LeaveRequest.employee_id) == employee_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return RequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=total,
    )
