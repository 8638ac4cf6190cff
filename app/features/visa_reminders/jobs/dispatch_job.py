"""
Reminder dispatch background job.

Runs the dispatcher once a day at REMINDER_DISPATCH_HOUR (UTC). The same
run can be triggered on demand through POST /reminders/dispatch, which is
how an external cron drives it in deployments without the worker.

Usage:
    python -m app.jobs.worker reminder_dispatch
"""

import asyncio
from datetime import UTC, datetime, timedelta

from app.config import settings
from app.db.pool import db_pool
from app.features.visa_reminders.services.dispatcher import (
    ReminderDispatcher,
    get_reminder_dispatcher,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ReminderDispatchJob:
    """Guards against overlapping dispatch runs within one process."""

    def __init__(self, dispatcher: ReminderDispatcher | None = None):
        self.is_running = False
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> ReminderDispatcher:
        return self._dispatcher or get_reminder_dispatcher()

    async def run_once(self) -> dict:
        """
        Run one dispatch pass.

        Returns:
            dict: {"success": bool, "results": dispatch summary or None, "error": str}
        """
        if self.is_running:
            logger.warning("Reminder dispatch already running, skipping")
            return {"success": False, "error": "Already running"}

        self.is_running = True
        start_time = datetime.now(UTC)

        try:
            result = await self.dispatcher.dispatch()
        except Exception as e:
            logger.error("Reminder dispatch run failed", error=str(e))
            return {"success": False, "error": str(e)}
        finally:
            self.is_running = False

        logger.info(
            "Reminder dispatch job completed",
            duration_seconds=(datetime.now(UTC) - start_time).total_seconds(),
            total=result.total,
            sent=result.sent,
            failed=result.failed,
        )
        return {"success": True, "message": result.message, "results": result.to_dict()}


def seconds_until_next_run(now: datetime, schedule_hour: int) -> float:
    next_run = now.replace(hour=schedule_hour, minute=0, second=0, microsecond=0)
    if now >= next_run:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


async def start_reminder_dispatch_scheduler() -> None:
    """Daily dispatch loop for the worker process."""
    dispatch_config = settings.get_dispatch_config()

    if not dispatch_config["dispatch_enabled"]:
        logger.info("Reminder dispatch scheduler DISABLED", environment=settings.environment)
        return

    if not db_pool.is_ready:
        await db_pool.initialize()

    schedule_hour = dispatch_config["dispatch_hour"]
    logger.info(
        "Reminder dispatch scheduler STARTED",
        schedule_hour=schedule_hour,
        environment=settings.environment,
    )

    try:
        while True:
            try:
                sleep_seconds = seconds_until_next_run(datetime.now(UTC), schedule_hour)
                logger.info("Reminder dispatch scheduled", sleep_seconds=sleep_seconds)
                await asyncio.sleep(sleep_seconds)

                result = await reminder_dispatch_job.run_once()
                logger.info("Scheduled reminder dispatch completed", result=result)

            except asyncio.CancelledError:
                logger.info("Reminder dispatch scheduler cancelled")
                break
            except Exception as e:
                logger.error("Error in reminder dispatch scheduler, will retry", error=str(e))
                await asyncio.sleep(3600)
    finally:
        await db_pool.close()


# Singleton instance for manual triggers
reminder_dispatch_job = ReminderDispatchJob()


async def run_reminder_dispatch_once() -> None:
    """Single dispatch pass for external cron runners (no daily loop)."""
    if not db_pool.is_ready:
        await db_pool.initialize()

    try:
        result = await reminder_dispatch_job.run_once()
        logger.info("One-off reminder dispatch completed", result=result)
    finally:
        await db_pool.close()
