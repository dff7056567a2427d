from __future__ import annotations

import enum


class LeaveClassification(enum.StrEnum):
    """How a leave type accrues and is consumed."""

    ANNUAL = "ANNUAL"
    ONE_TIME = "ONE_TIME"
    EVENT_REPEATABLE = "EVENT_REPEATABLE"


class AccrualBasis(enum.StrEnum):
    """Where an annual leave type's entitlement comes from."""

    SENIORITY = "SENIORITY"
    FIXED = "FIXED"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class BalanceField(enum.StrEnum):
    """Balance quantities that lifecycle transitions may adjust."""

    PENDING = "pending_days"
    USED = "used_days"


class HolidayType(enum.StrEnum):
    OFFICIAL = "OFFICIAL"
    COMPANY = "COMPANY"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_TYPE = "LEAVE_TYPE"
    BALANCE = "BALANCE"
    EVENT = "EVENT"
    REQUEST = "REQUEST"
    HOLIDAY = "HOLIDAY"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
