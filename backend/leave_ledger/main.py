from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from leave_ledger.api.health import router as health_router
from leave_ledger.api.router import api_router
from leave_ledger.config import get_settings
from leave_ledger.db import dispose_engine
from leave_ledger.exceptions import setup_exception_handlers
from leave_ledger.logging_config import configure_logging
from leave_ledger.middleware import setup_middleware
from leave_ledger.services.notification import DatabaseNotificationSink, set_notification_sink

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Wire production collaborators on startup; release the pool on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    set_notification_sink(DatabaseNotificationSink())
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    yield
    logger.info("Shutting down %s", settings.app_name)
    await dispose_engine()


def create_app() -> FastAPI:
    """Build the API application: middleware, error handlers and routers."""
    settings = get_settings()
    show_docs = settings.environment != "production"

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if show_docs else None,
        redoc_url="/redoc" if show_docs else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
