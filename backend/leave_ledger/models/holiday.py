# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import UUIDBase
from leave_ledger.models.enums import HolidayType


class Holiday(UUIDBase, table=True):
    """A non-working day excluded from leave day counts."""

    __tablename__ = "holiday"
    __table_args__ = (sa.UniqueConstraint("holiday_date", name="uq_holiday_date"),)

    holiday_date: datetime.date
    description: str = Field(max_length=255)
    type: str = Field(default=HolidayType.OFFICIAL, max_length=50)
    full_day: bool = Field(default=True)
