"""Constants and factories shared by the test modules."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from leave_ledger.schemas.auth import AuthContext
from leave_ledger.schemas.leave_type import CreateLeaveTypeRequest
from leave_ledger.services.leave_type import create_leave_type

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.leave_type import LeaveTypeResponse

ADMIN_ID = "ADMN800101AAA"
EMPLOYEE_ID = "GOMJ800315AB1"
EMPLOYEE_HIRE_DATE = date(2018, 3, 15)

ADMIN = AuthContext(user_id=ADMIN_ID, role="admin")
EMPLOYEE = AuthContext(user_id=EMPLOYEE_ID, role="employee")

ADMIN_HEADERS = {"X-User-Id": ADMIN_ID, "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": EMPLOYEE_ID, "X-Role": "employee"}


async def make_leave_type(session: AsyncSession, name: str, **overrides: Any) -> LeaveTypeResponse:
    """Configure a leave type through the service, with no notice period by default."""
    fields: dict[str, Any] = {"name": name, "min_notice_days": 0}
    fields.update(overrides)
    return await create_leave_type(session, ADMIN, CreateLeaveTypeRequest(**fields))
