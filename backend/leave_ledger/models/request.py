# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import RequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request with approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_request_status", "status"),
        sa.Index("ix_request_dates", "start_date", "end_date"),
        sa.UniqueConstraint(
            "employee_id",
            "leave_type_id",
            "start_date",
            "end_date",
            name="uq_request_employee_type_period",
        ),
    )

    employee_id: str = Field(max_length=20, index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    start_date: date
    end_date: date
    requested_days: int
    status: str = Field(default=RequestStatus.PENDING, max_length=50, sa_column_kwargs={"server_default": "PENDING"})
    anniversary_year: int | None = None
    balance_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_balance.id", ondelete="SET NULL"), nullable=True),
    )
    event_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_event.id", ondelete="SET NULL"), nullable=True),
    )
    notes: str | None = None
    balance_at_request: int | None = None
    rejection_reason: str | None = None
    decided_by: str | None = Field(default=None, max_length=20)
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
