# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveEvent(UUIDBase, TimestampMixin, table=True):
    """Record that an event-based benefit was exercised on ``event_date``.

    A one-time benefit may be held by at most one event per employee and
    leave type; revoking the event deletes the row and frees the claim.
    """

    __tablename__ = "leave_event"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_type_id", "event_date", name="uq_event_employee_type_date"),
        sa.Index(
            "uq_event_one_time_claim",
            "employee_id",
            "leave_type_id",
            unique=True,
            postgresql_where=sa.text("is_one_time"),
            sqlite_where=sa.text("is_one_time"),
        ),
    )

    employee_id: str = Field(max_length=20, index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    event_date: date
    description: str | None = None
    is_one_time: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
