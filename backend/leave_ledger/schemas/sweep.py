# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class SweepRunResponse(BaseModel):
    """Response from the anniversary sweep trigger endpoint."""

    evaluation_date: date
    employees_processed: int
    balances_created: int
    skipped: int
    errors: int


class EnsureBalancesResponse(BaseModel):
    """Response from materializing one employee's balances."""

    employee_id: str
    evaluation_date: date
    balances_created: int
