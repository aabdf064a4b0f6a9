"""APScheduler-based maintenance jobs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from powerwatch.config import settings

if TYPE_CHECKING:
    from powerwatch.services.alert_service import AlertService

logger = logging.getLogger(__name__)


class MaintenanceScheduler:
    """Daily housekeeping that is not part of the ingestion/alerting loops."""

    def __init__(
        self,
        alert_service: AlertService,
        session_factory: async_sessionmaker[AsyncSession],
        retention_days: int | None = None,
    ):
        self._alerts = alert_service
        self._session_factory = session_factory
        self._retention_days = settings.alert_retention_days if retention_days is None else retention_days
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1},
            timezone="UTC",
        )

    def start(self) -> None:
        """Register and start all maintenance jobs."""
        self._scheduler.add_job(
            self.cleanup_resolved_alerts,
            "cron",
            hour=0,
            minute=10,
            id="cleanup_resolved_alerts",
            name="Purge old resolved alerts",
        )
        self._scheduler.start()
        logger.info(
            "Maintenance scheduler started — purging resolved alerts older than %d days daily",
            self._retention_days,
        )

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Maintenance scheduler stopped")

    async def cleanup_resolved_alerts(self) -> int:
        try:
            async with self._session_factory() as db:
                return await self._alerts.cleanup_resolved(db, self._retention_days)
        except Exception as e:
            logger.error("Alert cleanup failed: %s", e)
            return 0
