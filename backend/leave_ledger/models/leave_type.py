from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import AccrualBasis, LeaveClassification


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """A leave category (e.g. Vacaciones Ordinarias, Matrimonio).

    ``classification`` and ``accrual_basis`` are resolved once when the type
    is configured and read from here afterwards.
    """

    __tablename__ = "leave_type"
    __table_args__ = (sa.UniqueConstraint("name", name="uq_leave_type_name"),)

    name: str = Field(max_length=255)
    description: str | None = None
    is_paid: bool = Field(default=True)
    requires_approval: bool = Field(default=True)
    max_days_per_year: int | None = None
    max_days_per_request: int | None = None
    min_notice_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    color_code: str = Field(default="#4CAF50", max_length=7)
    classification: str = Field(default=LeaveClassification.ANNUAL, max_length=50)
    accrual_basis: str = Field(default=AccrualBasis.FIXED, max_length=50)
    event_entitled_days: int | None = None
