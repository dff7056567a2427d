# ruff: noqa: B008, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AdminDep, AuthDep, ensure_self_or_admin
from leave_ledger.db import SessionDep
from leave_ledger.schemas.balance import BalanceListResponse
from leave_ledger.schemas.sweep import EnsureBalancesResponse
from leave_ledger.services import balance as balance_service
from leave_ledger.services import sweep as sweep_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: str,
    session: SessionDep,
    auth: AuthDep,
    on: date | None = Query(default=None),
) -> BalanceListResponse:
    """Get an employee's balances, optionally only those in effect on a date."""
    ensure_self_or_admin(auth, employee_id)
    return await balance_service.get_employee_balances(session, employee_id, on)


@employee_balance_router.post("/ensure", response_model=EnsureBalancesResponse)
async def ensure_employee_balances(
    employee_id: str,
    session: SessionDep,
    auth: AdminDep,
    evaluation_date: date | None = Query(default=None),
) -> EnsureBalancesResponse:
    """Materialize any missing annual balances for one employee (admin only)."""
    on = evaluation_date or date.today()
    created = await sweep_service.ensure_employee_balances(session, employee_id, on)
    return EnsureBalancesResponse(employee_id=employee_id, evaluation_date=on, balances_created=created)
