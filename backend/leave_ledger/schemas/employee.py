# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class UpsertEmployeeRequest(BaseModel):
    """Request body for upserting an employee in the stub directory."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=255)
    hire_date: date
    is_active: bool = True


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: str
    name: str
    email: str
    hire_date: date
    is_active: bool


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
