"""Tests for the anniversary sweep and the per-employee balance hook."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import NotFoundError
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.services import sweep as sweep_service
from leave_ledger.services.balance import ensure_balance
from leave_ledger.services.employee import EmployeeInfo
from leave_ledger.services.leave_type import get_leave_type
from leave_ledger.services.sweep import ensure_employee_balances, run_anniversary_sweep

from helpers import ADMIN_HEADERS, EMPLOYEE_HEADERS, EMPLOYEE_ID, make_leave_type

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.leave_type import LeaveTypeResponse
    from leave_ledger.services.employee import InMemoryEmployeeDirectory
    from leave_ledger.services.notification import InMemoryNotificationSink

EVALUATION_DATE = date(2024, 6, 1)


def _employee(employee_id: str, hire_date: date, *, is_active: bool = True) -> EmployeeInfo:
    return EmployeeInfo(
        id=employee_id,
        name=f"Empleado {employee_id}",
        email=f"{employee_id.lower()}@example.com",
        hire_date=hire_date,
        is_active=is_active,
    )


async def _years(session: AsyncSession, employee_id: str) -> list[tuple[int, int]]:
    result = await session.execute(
        select(LeaveBalance)
        .where(col(LeaveBalance.employee_id) == employee_id)
        .order_by(col(LeaveBalance.anniversary_year))
    )
    return [(b.anniversary_year, b.entitled_days) for b in result.scalars().all()]


async def test_sweep_materializes_every_service_year(
    db_session: AsyncSession, vacation_type: LeaveTypeResponse
) -> None:
    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.employees_processed == 1
    assert result.balances_created == 7
    assert result.errors == 0
    assert await _years(db_session, EMPLOYEE_ID) == [
        (0, 12),
        (1, 14),
        (2, 16),
        (3, 18),
        (4, 20),
        (5, 22),
        (6, 22),
    ]


async def test_sweep_periods_are_contiguous(db_session: AsyncSession, vacation_type: LeaveTypeResponse) -> None:
    await run_anniversary_sweep(db_session, EVALUATION_DATE)

    result = await db_session.execute(select(LeaveBalance).order_by(col(LeaveBalance.anniversary_year)))
    balances = list(result.scalars().all())
    assert balances[0].period_start == date(2018, 9, 15)
    for previous, current in zip(balances, balances[1:], strict=False):
        assert (current.period_start - previous.period_end).days == 1
        assert current.applicable_year == current.period_start.year


async def test_sweep_is_idempotent(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    notification_sink: InMemoryNotificationSink,
) -> None:
    await run_anniversary_sweep(db_session, EVALUATION_DATE)
    assert len(notification_sink.sent) == 7
    notification_sink.clear()

    rerun = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert rerun.balances_created == 0
    assert notification_sink.sent == []
    assert len(await _years(db_session, EMPLOYEE_ID)) == 7


async def test_sweep_fills_only_missing_years(db_session: AsyncSession, vacation_type: LeaveTypeResponse) -> None:
    leave_type = await get_leave_type(db_session, vacation_type.id)
    for year in range(4):
        await ensure_balance(db_session, EMPLOYEE_ID, leave_type, year)
    await db_session.commit()

    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.balances_created == 3
    assert [year for year, _ in await _years(db_session, EMPLOYEE_ID)] == list(range(7))


async def test_sweep_fills_gaps_below_a_later_year(
    db_session: AsyncSession, vacation_type: LeaveTypeResponse
) -> None:
    leave_type = await get_leave_type(db_session, vacation_type.id)
    await ensure_balance(db_session, EMPLOYEE_ID, leave_type, 6)
    await db_session.commit()

    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.balances_created == 6
    assert [year for year, _ in await _years(db_session, EMPLOYEE_ID)] == list(range(7))


async def test_sweep_fixed_types_use_their_allowance(db_session: AsyncSession) -> None:
    fallecimiento = await make_leave_type(db_session, "Fallecimiento Familiar")
    personal = await make_leave_type(db_session, "Permiso Personal")

    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.balances_created == 7
    rows = await db_session.execute(select(LeaveBalance).where(col(LeaveBalance.leave_type_id) == fallecimiento.id))
    assert {b.entitled_days for b in rows.scalars().all()} == {5}
    rows = await db_session.execute(select(LeaveBalance).where(col(LeaveBalance.leave_type_id) == personal.id))
    assert rows.scalars().all() == []


async def test_sweep_precreates_upcoming_year(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    employee_directory: InMemoryEmployeeDirectory,
) -> None:
    employee_directory.clear()
    employee_directory.seed(_employee("LOPA850910XY2", date(2020, 9, 10)))

    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.balances_created == 5
    years = await _years(db_session, "LOPA850910XY2")
    assert years == [(0, 12), (1, 14), (2, 16), (3, 18), (4, 20)]


async def test_sweep_waits_for_first_period(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    employee_directory: InMemoryEmployeeDirectory,
) -> None:
    employee_directory.clear()
    employee_directory.seed(_employee("NUEV900115AB3", date(2024, 1, 15)))

    early = await run_anniversary_sweep(db_session, EVALUATION_DATE)
    assert early.skipped == 1
    assert early.balances_created == 0

    later = await run_anniversary_sweep(db_session, date(2024, 7, 20))
    assert later.balances_created == 1
    assert await _years(db_session, "NUEV900115AB3") == [(0, 12)]


async def test_sweep_skips_inactive_employees(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    employee_directory: InMemoryEmployeeDirectory,
) -> None:
    employee_directory.seed(_employee("BAJA800101ZZ9", date(2010, 1, 4), is_active=False))

    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.employees_processed == 1
    assert result.skipped == 1
    assert await _years(db_session, "BAJA800101ZZ9") == []


async def test_sweep_ignores_event_based_types(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    matrimonio_type: LeaveTypeResponse,
) -> None:
    await run_anniversary_sweep(db_session, EVALUATION_DATE)

    result = await db_session.execute(
        select(LeaveBalance).where(col(LeaveBalance.leave_type_id) == matrimonio_type.id)
    )
    assert result.scalars().all() == []


async def test_sweep_isolates_failing_employee(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    employee_directory: InMemoryEmployeeDirectory,
    notification_sink: InMemoryNotificationSink,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    employee_directory.seed(_employee("FALL800101ER1", date(2015, 2, 2)))
    real_ensure = sweep_service.ensure_balance

    async def _ensure_fails_late(session, employee_id, leave_type, year, **kwargs):
        if employee_id == "FALL800101ER1" and year == 3:
            raise RuntimeError("directory timeout")
        return await real_ensure(session, employee_id, leave_type, year, **kwargs)

    monkeypatch.setattr(sweep_service, "ensure_balance", _ensure_fails_late)

    result = await run_anniversary_sweep(db_session, EVALUATION_DATE)

    assert result.errors == 1
    assert result.employees_processed == 2
    assert result.balances_created == 7
    assert await _years(db_session, "FALL800101ER1") == []
    assert {n.employee_id for n in notification_sink.sent} == {EMPLOYEE_ID}


async def test_ensure_employee_balances(db_session: AsyncSession, vacation_type: LeaveTypeResponse) -> None:
    assert await ensure_employee_balances(db_session, EMPLOYEE_ID, EVALUATION_DATE) == 7
    assert await ensure_employee_balances(db_session, EMPLOYEE_ID, EVALUATION_DATE) == 0


async def test_ensure_employee_balances_before_first_period(
    db_session: AsyncSession,
    vacation_type: LeaveTypeResponse,
    employee_directory: InMemoryEmployeeDirectory,
) -> None:
    employee_directory.seed(_employee("NUEV900115AB3", date(2024, 1, 15)))
    assert await ensure_employee_balances(db_session, "NUEV900115AB3", EVALUATION_DATE) == 0


async def test_ensure_employee_balances_unknown(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await ensure_employee_balances(db_session, "NOEX900101XX1", EVALUATION_DATE)


async def test_http_trigger_sweep(async_client: AsyncClient, vacation_type: LeaveTypeResponse) -> None:
    response = await async_client.post(
        "/sweeps/anniversary", params={"evaluation_date": "2024-06-01"}, headers=EMPLOYEE_HEADERS
    )
    assert response.status_code == 403

    response = await async_client.post(
        "/sweeps/anniversary", params={"evaluation_date": "2024-06-01"}, headers=ADMIN_HEADERS
    )
    assert response.status_code == 200
    assert response.json() == {
        "evaluation_date": "2024-06-01",
        "employees_processed": 1,
        "balances_created": 7,
        "skipped": 0,
        "errors": 0,
    }
