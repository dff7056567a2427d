"""Worker process for the scheduled anniversary sweep.

Runs an asyncio loop that materializes missing annual balances once per
``sweep_interval_seconds`` (daily by default).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_ledger.config import get_settings
from leave_ledger.db import dispose_engine, session_scope
from leave_ledger.logging_config import configure_logging
from leave_ledger.services.notification import DatabaseNotificationSink, set_notification_sink
from leave_ledger.services.sweep import SweepResult, run_anniversary_sweep

logger = logging.getLogger(__name__)


async def run_sweep_once(evaluation_date: date) -> SweepResult | None:
    """Run one sweep in a fresh session. Failures are logged, not raised."""
    logger.info("Running anniversary sweep for %s", evaluation_date)
    try:
        async with session_scope() as session:
            result = await run_anniversary_sweep(session, evaluation_date)
    except Exception:
        logger.exception("Anniversary sweep failed for %s", evaluation_date)
        return None

    logger.info(
        "Anniversary sweep complete for %s: employees=%d created=%d skipped=%d errors=%d",
        evaluation_date,
        result.employees_processed,
        result.balances_created,
        result.skipped,
        result.errors,
    )
    return result


async def run_sweep_loop() -> None:
    """Sweep once per interval until cancelled."""
    settings = get_settings()
    logger.info("Sweep worker started, interval=%ds", settings.sweep_interval_seconds)

    try:
        while True:
            await run_sweep_once(date.today())
            await asyncio.sleep(settings.sweep_interval_seconds)
    finally:
        await dispose_engine()


def main() -> None:
    """Entry point for the ``leave-ledger-worker`` console script."""
    configure_logging(get_settings())
    set_notification_sink(DatabaseNotificationSink())
    asyncio.run(run_sweep_loop())


if __name__ == "__main__":
    main()
