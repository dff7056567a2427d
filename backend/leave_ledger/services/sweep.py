"""Anniversary sweep: materialize missing annual balances for every employee."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import NotFoundError
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import LeaveClassification
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.services.accrual import compute_entitlement, latest_materializable_year
from leave_ledger.services.balance import ensure_balance
from leave_ledger.services.employee import get_employee_directory
from leave_ledger.services.notification import dispatch_notifications, pending_mark, rollback_to_mark

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.services.employee import EmployeeInfo

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Summary of an anniversary sweep run."""

    evaluation_date: date
    employees_processed: int = 0
    balances_created: int = 0
    skipped: int = 0
    errors: int = 0


async def _annual_leave_types(session: AsyncSession) -> list[LeaveType]:
    result = await session.execute(
        select(LeaveType)
        .where(col(LeaveType.classification) == LeaveClassification.ANNUAL.value)
        .order_by(col(LeaveType.name))
    )
    return list(result.scalars().all())


async def _materialized_years(session: AsyncSession, employee_id: str, leave_type_id: uuid.UUID) -> set[int]:
    result = await session.execute(
        select(col(LeaveBalance.anniversary_year)).where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
            col(LeaveBalance.is_event_based).is_(False),
        )
    )
    return set(result.scalars().all())


async def _materialize_employee_balances(
    session: AsyncSession,
    employee: EmployeeInfo,
    leave_types: list[LeaveType],
    on: date,
) -> int | None:
    """Create every missing annual balance up to the employee's current service year.

    Every year from 0 is checked, so a gap below an existing later year is
    filled too.

    Returns the number of rows created, or ``None`` when the employee has not
    yet completed the first period.
    """
    last_wanted = latest_materializable_year(employee.hire_date, on)
    if last_wanted is None:
        return None

    created = 0
    for leave_type in leave_types:
        existing = await _materialized_years(session, employee.id, leave_type.id)
        for year in range(last_wanted + 1):
            if year in existing:
                continue
            if compute_entitlement(leave_type, employee.hire_date, year).entitled_days <= 0:
                continue
            _, was_created = await ensure_balance(
                session, employee.id, leave_type, year, hire_date=employee.hire_date
            )
            if was_created:
                created += 1
    return created


async def run_anniversary_sweep(session: AsyncSession, evaluation_date: date) -> SweepResult:
    """Materialize missing annual balances for all active employees.

    Each employee is processed in its own SAVEPOINT; a failure is logged and
    counted, and the rest of the run continues. The function is idempotent:
    re-running for the same date creates nothing new.

    Args:
        session: Database session. Committed once at the end of the run.
        evaluation_date: The "today" the sweep evaluates service years against.
    """
    result = SweepResult(evaluation_date=evaluation_date)
    leave_types = await _annual_leave_types(session)
    employees = await get_employee_directory().list_employees()

    for employee in employees:
        if not employee.is_active:
            result.skipped += 1
            continue

        result.employees_processed += 1
        mark = pending_mark(session)
        try:
            async with session.begin_nested():
                created = await _materialize_employee_balances(session, employee, leave_types, evaluation_date)
        except Exception:
            logger.exception("Anniversary sweep failed for employee=%s", employee.id)
            rollback_to_mark(session, mark)
            result.errors += 1
            continue

        if created is None:
            result.skipped += 1
        else:
            result.balances_created += created

    await session.commit()
    await dispatch_notifications(session)
    return result


async def ensure_employee_balances(session: AsyncSession, employee_id: str, on: date) -> int:
    """Materialize one employee's missing annual balances (new-employee hook).

    Returns the number of balances created.
    """
    employee = await get_employee_directory().get_employee(employee_id)
    if employee is None:
        msg = f"Employee {employee_id} not found"
        raise NotFoundError(msg)

    leave_types = await _annual_leave_types(session)
    created = await _materialize_employee_balances(session, employee, leave_types, on)
    await session.commit()
    await dispatch_notifications(session)
    return created or 0
