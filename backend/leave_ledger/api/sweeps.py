# ruff: noqa: B008, TC001, TC003
"""API endpoint for triggering the anniversary sweep."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AdminDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.sweep import SweepRunResponse
from leave_ledger.services.sweep import run_anniversary_sweep

sweeps_router = APIRouter(prefix="/sweeps", tags=["sweeps"])


@sweeps_router.post("/anniversary", response_model=SweepRunResponse)
async def trigger_anniversary_sweep(
    session: SessionDep,
    auth: AdminDep,
    evaluation_date: date | None = Query(default=None),
) -> SweepRunResponse:
    """Run the anniversary sweep now (admin only).

    Useful for backfills: pass ``evaluation_date`` to evaluate service years
    as of another day. Re-running for the same date creates nothing new.
    """
    result = await run_anniversary_sweep(session, evaluation_date or date.today())
    return SweepRunResponse(
        evaluation_date=result.evaluation_date,
        employees_processed=result.employees_processed,
        balances_created=result.balances_created,
        skipped=result.skipped,
        errors=result.errors,
    )
