# ruff: noqa: TC003
from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class EmployeeInfo(BaseModel):
    """Employee metadata from the Employee Directory."""

    id: str  # tax/identity code, e.g. an RFC
    name: str
    email: str
    hire_date: date
    is_active: bool = True


@runtime_checkable
class EmployeeDirectory(Protocol):
    """Interface for the Employee Directory."""

    async def get_employee(self, employee_id: str) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def list_employees(self) -> list[EmployeeInfo]:
        """List every known employee, active or not."""
        ...


class InMemoryEmployeeDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[str, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    def clear(self) -> None:
        self._employees.clear()

    async def get_employee(self, employee_id: str) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get(employee_id)

    async def list_employees(self) -> list[EmployeeInfo]:
        """List every known employee, active or not."""
        return list(self._employees.values())


_employee_directory: EmployeeDirectory = InMemoryEmployeeDirectory()


def get_employee_directory() -> EmployeeDirectory:
    """FastAPI dependency for the Employee Directory."""
    return _employee_directory


def set_employee_directory(directory: EmployeeDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _employee_directory
    _employee_directory = directory


async def get_hire_date(employee_id: str) -> date | None:
    employee = await get_employee_directory().get_employee(employee_id)
    return employee.hire_date if employee is not None else None


async def is_active(employee_id: str) -> bool:
    employee = await get_employee_directory().get_employee(employee_id)
    return employee is not None and employee.is_active
