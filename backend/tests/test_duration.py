"""Tests for working-day counting."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from leave_ledger.config import get_settings
from leave_ledger.exceptions import InvalidInputError
from leave_ledger.models.holiday import Holiday
from leave_ledger.services.duration import count_working_days, day_details, is_holiday

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def _holiday(session: AsyncSession, day: date, *, full_day: bool = True) -> None:
    session.add(Holiday(holiday_date=day, description="Feriado", full_day=full_day))
    await session.commit()


async def test_week_without_holidays(db_session: AsyncSession) -> None:
    details = await day_details(db_session, date(2024, 7, 1), date(2024, 7, 7))

    assert details.calendar_days == 7
    assert details.working_days == 6
    assert details.rest_days == 1
    assert details.holidays == 0


async def test_single_day(db_session: AsyncSession) -> None:
    assert await count_working_days(db_session, date(2024, 7, 3), date(2024, 7, 3)) == 1
    assert await count_working_days(db_session, date(2024, 7, 7), date(2024, 7, 7)) == 0


async def test_holidays_are_excluded(db_session: AsyncSession) -> None:
    await _holiday(db_session, date(2024, 9, 16))

    details = await day_details(db_session, date(2024, 9, 16), date(2024, 9, 20))

    assert details.working_days == 4
    assert details.holidays == 1
    assert await is_holiday(db_session, date(2024, 9, 16))
    assert not await is_holiday(db_session, date(2024, 9, 17))


async def test_holiday_on_rest_day_counts_once(db_session: AsyncSession) -> None:
    await _holiday(db_session, date(2024, 9, 15))

    details = await day_details(db_session, date(2024, 9, 9), date(2024, 9, 15))

    assert (details.working_days, details.rest_days, details.holidays) == (6, 1, 0)


async def test_partial_day_holiday_is_a_working_day(db_session: AsyncSession) -> None:
    await _holiday(db_session, date(2024, 12, 24), full_day=False)

    assert await count_working_days(db_session, date(2024, 12, 23), date(2024, 12, 24)) == 2
    assert not await is_holiday(db_session, date(2024, 12, 24))


async def test_reversed_range_rejected(db_session: AsyncSession) -> None:
    with pytest.raises(InvalidInputError):
        await day_details(db_session, date(2024, 7, 3), date(2024, 7, 1))


async def test_rest_weekdays_from_settings(db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(get_settings(), "rest_weekdays", [5, 6])

    assert await count_working_days(db_session, date(2024, 7, 1), date(2024, 7, 7)) == 5
