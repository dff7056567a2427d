# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveBalance(UUIDBase, TimestampMixin, table=True):
    """Per-employee, per-leave-type, per-service-year day counts.

    Read-modify-write happens under a row lock; ``version`` is bumped on
    every mutation.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_type_id", "anniversary_year", name="uq_balance_employee_type_year"),
        sa.Index("ix_balance_period", "period_start", "period_end"),
    )

    employee_id: str = Field(max_length=20, index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    anniversary_year: int
    applicable_year: int | None = None
    period_start: date
    period_end: date
    entitled_days: int
    used_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    pending_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    expires_at: date | None = None
    is_event_based: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    event_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_event.id", ondelete="SET NULL"), nullable=True),
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})

    @property
    def available_days(self) -> int:
        return self.entitled_days - self.used_days - self.pending_days
