"""Working-day counting over a date range.

Weekly rest days come from settings (Sunday only by default); full-day
holidays from the ``holiday`` table are excluded as well.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import InvalidInputError
from leave_ledger.models.holiday import Holiday

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class DayBreakdown:
    """How the days of an inclusive date range are classified."""

    calendar_days: int
    working_days: int
    rest_days: int
    holidays: int


def _iter_days(start_date: date, end_date: date) -> Iterator[date]:
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


async def _fetch_holiday_dates(session: AsyncSession, start_date: date, end_date: date) -> set[date]:
    """Fetch full-day holidays in the given date range."""
    result = await session.execute(
        select(col(Holiday.holiday_date)).where(
            col(Holiday.holiday_date) >= start_date,
            col(Holiday.holiday_date) <= end_date,
            col(Holiday.full_day).is_(True),
        )
    )
    return {row[0] for row in result.all()}


async def day_details(session: AsyncSession, start_date: date, end_date: date) -> DayBreakdown:
    """Classify every day in ``[start_date, end_date]``.

    A holiday that falls on a rest day counts as a rest day.
    """
    if end_date < start_date:
        msg = "end_date must be on or after start_date"
        raise InvalidInputError(msg)

    rest_weekdays = set(get_settings().rest_weekdays)
    holiday_dates = await _fetch_holiday_dates(session, start_date, end_date)

    working = rest = holidays = 0
    for day in _iter_days(start_date, end_date):
        if day.weekday() in rest_weekdays:
            rest += 1
        elif day in holiday_dates:
            holidays += 1
        else:
            working += 1

    return DayBreakdown(
        calendar_days=(end_date - start_date).days + 1,
        working_days=working,
        rest_days=rest,
        holidays=holidays,
    )


async def count_working_days(session: AsyncSession, start_date: date, end_date: date) -> int:
    """Number of working days in ``[start_date, end_date]``."""
    details = await day_details(session, start_date, end_date)
    return details.working_days


async def is_holiday(session: AsyncSession, day: date) -> bool:
    return day in await _fetch_holiday_dates(session, day, day)
