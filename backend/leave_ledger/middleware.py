from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request, Response

    from leave_ledger.config import Settings

logger = logging.getLogger("leave_ledger.access")


async def _log_request(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    started = time.perf_counter()
    response = await call_next(request)
    logger.debug(
        "%s %s -> %d (%.1f ms) user=%s",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
        request.headers.get("X-User-Id", "-"),
    )
    return response


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """CORS for the dev auth headers, plus a DEBUG access log line per request."""
    app.middleware("http")(_log_request)
    app.add_middleware(
        CORSMiddleware,  # ty: ignore[invalid-argument-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "X-User-Id", "X-Role"],
    )
