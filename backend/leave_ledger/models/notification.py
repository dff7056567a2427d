from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import UUIDBase, now_utc


class Notification(UUIDBase, table=True):
    """Message shown to an employee about changes to their balances."""

    __tablename__ = "notification"

    employee_id: str = Field(max_length=20, index=True)
    title: str = Field(max_length=255)
    message: str
    is_read: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
