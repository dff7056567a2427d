"""Employee notifications about balance assignments.

Notifications are queued on the session while a transaction is open and
dispatched only after it commits. Delivery is best effort: a failing sink
is logged and never rolls back or fails the ledger operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from leave_ledger.db import session_scope
from leave_ledger.models.notification import Notification

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_PENDING_KEY = "pending_notifications"


@dataclass(frozen=True)
class PendingNotification:
    employee_id: str
    title: str
    message: str


@runtime_checkable
class NotificationSink(Protocol):
    """Interface for delivering notifications to employees."""

    async def notify(self, employee_id: str, title: str, message: str) -> None: ...


class LoggingNotificationSink:
    """Writes notifications to the application log."""

    async def notify(self, employee_id: str, title: str, message: str) -> None:
        logger.info("Notification for %s: %s (%s)", employee_id, title, message)


class InMemoryNotificationSink:
    """Collects notifications in a list, for tests and development."""

    def __init__(self) -> None:
        self.sent: list[PendingNotification] = []

    async def notify(self, employee_id: str, title: str, message: str) -> None:
        self.sent.append(PendingNotification(employee_id, title, message))

    def clear(self) -> None:
        self.sent.clear()


class DatabaseNotificationSink:
    """Persists notifications to the ``notification`` table in its own session."""

    async def notify(self, employee_id: str, title: str, message: str) -> None:
        async with session_scope() as session:
            session.add(Notification(employee_id=employee_id, title=title, message=message))
            await session.commit()


_notification_sink: NotificationSink = LoggingNotificationSink()


def get_notification_sink() -> NotificationSink:
    return _notification_sink


def set_notification_sink(sink: NotificationSink) -> None:
    """Override the sink (for testing or production wiring)."""
    global _notification_sink
    _notification_sink = sink


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------


def _fmt(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def balance_assigned(
    employee_id: str,
    leave_type_name: str,
    entitled_days: int,
    period_start: date,
    period_end: date,
) -> PendingNotification:
    return PendingNotification(
        employee_id=employee_id,
        title=f"Nueva asignación de {leave_type_name}",
        message=(
            f"Se te han asignado {entitled_days} días de {leave_type_name} "
            f"para el periodo {_fmt(period_start)} al {_fmt(period_end)}"
        ),
    )


def event_registered(
    employee_id: str,
    leave_type_name: str,
    entitled_days: int,
    start_date: date,
    end_date: date,
) -> PendingNotification:
    return PendingNotification(
        employee_id=employee_id,
        title=f"Solicitud de {leave_type_name} registrada",
        message=(
            f"Se ha registrado una solicitud de {leave_type_name} "
            f"del {_fmt(start_date)} al {_fmt(end_date)} por {entitled_days} días."
        ),
    )


# ---------------------------------------------------------------------------
# Queue and dispatch
# ---------------------------------------------------------------------------


def queue_notification(session: AsyncSession, notification: PendingNotification) -> None:
    """Hold a notification until the session's transaction commits."""
    session.info.setdefault(_PENDING_KEY, []).append(notification)


def discard_notifications(session: AsyncSession) -> None:
    """Drop queued notifications, e.g. after a rollback."""
    session.info.pop(_PENDING_KEY, None)


def pending_mark(session: AsyncSession) -> int:
    """Number of notifications currently queued, for use with ``rollback_to_mark``."""
    return len(session.info.get(_PENDING_KEY, []))


def rollback_to_mark(session: AsyncSession, mark: int) -> None:
    """Drop notifications queued after ``mark`` was taken."""
    pending = session.info.get(_PENDING_KEY)
    if pending is not None:
        del pending[mark:]


async def dispatch_notifications(session: AsyncSession) -> int:
    """Send everything queued on ``session``. Call only after commit.

    Returns the number of notifications delivered successfully.
    """
    pending: list[PendingNotification] = session.info.pop(_PENDING_KEY, [])
    sink = get_notification_sink()
    delivered = 0
    for item in pending:
        try:
            await sink.notify(item.employee_id, item.title, item.message)
        except Exception:
            logger.exception("Failed to deliver notification %r to %s", item.title, item.employee_id)
            continue
        delivered += 1
    return delivered
