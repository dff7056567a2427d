from sqlmodel import SQLModel

from leave_ledger.models.audit import AuditLog
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import (
    AccrualBasis,
    AuditAction,
    AuditEntityType,
    BalanceField,
    HolidayType,
    LeaveClassification,
    RequestStatus,
)
from leave_ledger.models.event import LeaveEvent
from leave_ledger.models.holiday import Holiday
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.models.notification import Notification
from leave_ledger.models.request import LeaveRequest

__all__ = [
    "AccrualBasis",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "BalanceField",
    "Holiday",
    "HolidayType",
    "LeaveBalance",
    "LeaveClassification",
    "LeaveEvent",
    "LeaveRequest",
    "LeaveType",
    "Notification",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
