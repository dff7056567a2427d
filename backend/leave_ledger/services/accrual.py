"""Accrual calculator: service-year periods and entitled days.

Everything here is pure date arithmetic; no database access.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from leave_ledger.config import get_settings
from leave_ledger.exceptions import InvalidInputError
from leave_ledger.models.enums import AccrualBasis

if TYPE_CHECKING:
    from leave_ledger.config import SeniorityTier
    from leave_ledger.models.leave_type import LeaveType


@dataclass(frozen=True)
class Entitlement:
    """Entitled days and the period they cover for one service year."""

    anniversary_year: int
    entitled_days: int
    period_start: date
    period_end: date


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------


def add_months(d: date, months: int) -> date:
    """Shift ``d`` by whole months, clamping the day to the target month's end."""
    total = d.year * 12 + (d.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    day = min(d.day, monthrange(year, month)[1])
    return date(year, month, day)


def add_years(d: date, years: int) -> date:
    """Shift ``d`` by whole years; Feb 29 becomes Feb 28 in non-leap years."""
    return add_months(d, years * 12)


def completed_years(hire_date: date, on: date) -> int:
    """Whole service years completed by ``on``. Negative before the hire date."""
    years = on.year - hire_date.year
    if add_years(hire_date, years) > on:
        years -= 1
    return years


def months_of_service(hire_date: date, on: date) -> int:
    """Whole months of service completed by ``on``."""
    months = (on.year - hire_date.year) * 12 + (on.month - hire_date.month)
    if add_months(hire_date, months) > on:
        months -= 1
    return months


def anniversary_year_for(hire_date: date, on: date) -> int:
    """Service year that ``on`` falls in (never below 0)."""
    return max(completed_years(hire_date, on), 0)


def max_anniversary_year(hire_date: date, on: date, first_period_months: int | None = None) -> int | None:
    """Highest service year the employee has reached on ``on``.

    ``None`` until the first-period threshold (6 months by default) is met,
    0 for the remainder of the first year, completed years afterwards.
    """
    if first_period_months is None:
        first_period_months = get_settings().first_period_months
    months = months_of_service(hire_date, on)
    if months < first_period_months:
        return None
    if months < 12:
        return 0
    return completed_years(hire_date, on)


def latest_materializable_year(hire_date: date, on: date, first_period_months: int | None = None) -> int | None:
    """Highest service year whose balance may exist on ``on``.

    That is the reached year, or the next one when its period begins later in
    the same calendar year. ``None`` before the first period is reached.
    """
    reached = max_anniversary_year(hire_date, on, first_period_months)
    if reached is None:
        return None
    next_start, _ = period_for_year(hire_date, reached + 1, first_period_months)
    if next_start.year == on.year and next_start > on:
        return reached + 1
    return reached


def period_for_year(hire_date: date, year: int, first_period_months: int | None = None) -> tuple[date, date]:
    """Return the inclusive ``(start, end)`` of service year ``year``.

    Year 0 starts once the first period threshold has elapsed; later years
    start on the hire anniversary. Every period ends the day before the next
    anniversary.
    """
    if year < 0:
        msg = f"Anniversary year must be >= 0, got {year}"
        raise InvalidInputError(msg)
    if first_period_months is None:
        first_period_months = get_settings().first_period_months
    start = add_months(hire_date, first_period_months) if year == 0 else add_years(hire_date, year)
    end = add_years(hire_date, year + 1) - timedelta(days=1)
    return start, end


# ---------------------------------------------------------------------------
# Entitlement
# ---------------------------------------------------------------------------


def seniority_entitled_days(years: int, schedule: list[SeniorityTier] | None = None) -> int:
    """Vacation days for a service year from the seniority step table."""
    if years < 0:
        return 0
    if schedule is None:
        schedule = get_settings().seniority_schedule
    for tier in sorted(schedule, key=lambda t: t.min_years, reverse=True):
        if years >= tier.min_years:
            return tier.days
    return 0


def compute_entitlement(leave_type: LeaveType, hire_date: date, year: int) -> Entitlement:
    """Entitlement of an annual leave type for service year ``year``.

    A fixed type with no yearly allowance is entitled to 0 days; no balance
    is materialized for it.
    """
    period_start, period_end = period_for_year(hire_date, year)
    if leave_type.accrual_basis == AccrualBasis.SENIORITY:
        days = seniority_entitled_days(year)
    elif leave_type.max_days_per_year is not None:
        days = leave_type.max_days_per_year
    else:
        days = 0
    return Entitlement(
        anniversary_year=year,
        entitled_days=days,
        period_start=period_start,
        period_end=period_end,
    )


def compute_event_entitlement(leave_type: LeaveType, hire_date: date, start_date: date, end_date: date) -> Entitlement:
    """Entitlement of an event-based leave type, anchored to the request's dates."""
    if leave_type.event_entitled_days is not None:
        days = leave_type.event_entitled_days
    elif leave_type.max_days_per_year is not None:
        days = leave_type.max_days_per_year
    else:
        days = (end_date - start_date).days + 1
    return Entitlement(
        anniversary_year=anniversary_year_for(hire_date, start_date),
        entitled_days=days,
        period_start=start_date,
        period_end=end_date,
    )
