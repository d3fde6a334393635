"""APScheduler-based background job for the retention sweep."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from mdshelf.config import settings

if TYPE_CHECKING:
    from mdshelf.services.retention import RetentionEngine, RetentionReport

logger = logging.getLogger(__name__)


class RetentionScheduler:
    """Runs the retention sweep once a day, outside the request path."""

    JOB_ID = "retention_sweep"

    def __init__(self, engine: RetentionEngine):
        self._engine = engine
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )
        self.last_report: RetentionReport | None = None

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Register the daily sweep and start the scheduler."""
        self._scheduler.add_job(
            self._run_sweep,
            "cron",
            hour=settings.retention_hour,
            minute=settings.retention_minute,
            id=self.JOB_ID,
            name="Archive and delete stale unfiled files",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Retention scheduler started — daily at %02d:%02d",
            settings.retention_hour,
            settings.retention_minute,
        )

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Retention scheduler stopped")

    async def _run_sweep(self) -> None:
        """Scheduled entry point; failures are logged, never raised."""
        try:
            self.last_report = await self._engine.sweep()
        except Exception as e:
            logger.error("Retention sweep failed: %s", e)
