from __future__ import annotations

from fastapi import APIRouter

from leave_ledger.api.deps import AdminDep, AuthDep, ensure_self_or_admin
from leave_ledger.exceptions import NotFoundError
from leave_ledger.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from leave_ledger.services.employee import EmployeeInfo, get_employee_directory

employees_router = APIRouter(prefix="/employees", tags=["employees"])


def _build_employee_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        name=employee.name,
        email=employee.email,
        hire_date=employee.hire_date,
        is_active=employee.is_active,
    )


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def upsert_employee(
    employee_id: str,
    payload: UpsertEmployeeRequest,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create or update an employee in the stub directory (admin only)."""
    directory = get_employee_directory()
    employee = EmployeeInfo(
        id=employee_id,
        name=payload.name,
        email=payload.email,
        hire_date=payload.hire_date,
        is_active=payload.is_active,
    )
    directory.seed(employee)  # ty: ignore[unresolved-attribute]
    return _build_employee_response(employee)


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def get_employee(
    employee_id: str,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get employee info from the directory."""
    ensure_self_or_admin(auth, employee_id)
    employee = await get_employee_directory().get_employee(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return _build_employee_response(employee)


@employees_router.get(
    "",
    response_model=EmployeeListResponse,
)
async def list_employees(auth: AdminDep) -> EmployeeListResponse:
    """List all employees in the directory (admin only)."""
    employees = await get_employee_directory().list_employees()
    items = [_build_employee_response(e) for e in employees]
    return EmployeeListResponse(items=items, total=len(items))
