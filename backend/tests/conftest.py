"""Shared fixtures: SQLite in-memory database, HTTP client, in-memory collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from leave_ledger.db import get_session
from leave_ledger.main import app
from leave_ledger.models import SQLModel
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeDirectory, set_employee_directory
from leave_ledger.services.notification import InMemoryNotificationSink, set_notification_sink

from helpers import EMPLOYEE_HIRE_DATE, EMPLOYEE_ID, make_leave_type

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

    from leave_ledger.schemas.leave_type import LeaveTypeResponse

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite database per test, with SAVEPOINT support."""
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(_engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(_engine.sync_engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def employee_directory() -> Iterator[InMemoryEmployeeDirectory]:
    """Seed the in-memory employee directory for every test."""
    directory = InMemoryEmployeeDirectory()
    directory.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            name="Juan Gómez",
            email="juan.gomez@example.com",
            hire_date=EMPLOYEE_HIRE_DATE,
        )
    )
    set_employee_directory(directory)
    yield directory
    set_employee_directory(InMemoryEmployeeDirectory())


@pytest.fixture(autouse=True)
def notification_sink() -> Iterator[InMemoryNotificationSink]:
    sink = InMemoryNotificationSink()
    set_notification_sink(sink)
    yield sink
    set_notification_sink(InMemoryNotificationSink())


# ---------------------------------------------------------------------------
# Leave type factories
# ---------------------------------------------------------------------------


@pytest.fixture
async def vacation_type(db_session: AsyncSession) -> LeaveTypeResponse:
    return await make_leave_type(db_session, "Vacaciones Ordinarias", max_days_per_request=10)


@pytest.fixture
async def matrimonio_type(db_session: AsyncSession) -> LeaveTypeResponse:
    return await make_leave_type(db_session, "Matrimonio", max_days_per_year=5, max_days_per_request=5)


@pytest.fixture
async def maternidad_type(db_session: AsyncSession) -> LeaveTypeResponse:
    return await make_leave_type(db_session, "Maternidad", max_days_per_year=84, max_days_per_request=84)
