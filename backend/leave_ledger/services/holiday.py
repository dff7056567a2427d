from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import extract, func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import AppError, NotFoundError
from leave_ledger.models.enums import AuditAction, AuditEntityType, HolidayType
from leave_ledger.models.holiday import Holiday
from leave_ledger.schemas.holiday import HolidayListResponse, HolidayResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.holiday import CreateHolidayRequest


def _build_holiday_response(holiday: Holiday) -> HolidayResponse:
    return HolidayResponse(
        id=holiday.id,
        holiday_date=holiday.holiday_date,
        description=holiday.description,
        type=HolidayType(holiday.type),
        full_day=holiday.full_day,
    )


async def create_holiday(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateHolidayRequest,
) -> HolidayResponse:
    """Register a holiday."""
    holiday = Holiday(
        holiday_date=payload.holiday_date,
        description=payload.description,
        type=payload.type.value,
        full_day=payload.full_day,
    )
    session.add(holiday)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError("Holiday already exists for this date", status_code=409) from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    await session.refresh(holiday)
    return _build_holiday_response(holiday)


async def list_holidays(
    session: AsyncSession,
    year: int | None = None,
    offset: int = 0,
    limit: int = 50,
) -> HolidayListResponse:
    """List holidays with optional year filter."""
    base_filter = []
    if year is not None:
        base_filter.append(extract("year", col(Holiday.holiday_date)) == year)

    count_result = await session.execute(select(func.count()).select_from(Holiday).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Holiday).where(*base_filter).order_by(col(Holiday.holiday_date)).offset(offset).limit(limit)
    )
    holidays = list(result.scalars().all())

    return HolidayListResponse(
        items=[_build_holiday_response(h) for h in holidays],
        total=total,
    )


async def get_holiday(session: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
    """Get a single holiday or raise 404."""
    result = await session.execute(select(Holiday).where(col(Holiday.id) == holiday_id))
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise NotFoundError("Holiday not found")
    return holiday


async def delete_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
) -> None:
    """Delete a holiday. Requests already submitted keep their day counts."""
    holiday = await get_holiday(session, holiday_id)

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )

    await session.delete(holiday)
    await session.commit()
