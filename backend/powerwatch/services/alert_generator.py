"""Alert generator — periodic offline and threshold checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from powerwatch.models.alert import Alert, AlertSeverity, AlertType
from powerwatch.models.base import utcnow
from powerwatch.services.alert_service import AlertService
from powerwatch.services.config_service import ConfigService, ConfigSnapshot
from powerwatch.services.device_service import DeviceService
from powerwatch.services.periodic import PeriodicService
from powerwatch.services.reading_service import ReadingService
from powerwatch.services.suppression import SuppressionWindow
from powerwatch.services.threshold_policy import AlertCandidate, evaluate_reading

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 60_000


@dataclass
class GenerationResult:
    """What one cycle did."""
    skipped: bool = False
    offline_alerts: list[Alert] = field(default_factory=list)
    threshold_alerts: list[Alert] = field(default_factory=list)
    suppressed: int = 0

    @property
    def created(self) -> int:
        return len(self.offline_alerts) + len(self.threshold_alerts)


class AlertGenerator(PeriodicService):
    """
    Each cycle loads the configuration once, then

    1. raises ``device_offline`` for devices silent for longer than
       ``device_offline_threshold`` minutes;
    2. evaluates readings received since the previous cycle boundary
       (``now - interval``) against the thresholds.

    Candidates for which an unresolved alert of the same kind is still active
    are dropped by the suppression window.
    """

    name = "Alert generator"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config_service: ConfigService | None = None,
        alert_service: AlertService | None = None,
        reading_service: ReadingService | None = None,
        device_service: DeviceService | None = None,
        initial_delay: float = 0.0,
    ):
        super().__init__(DEFAULT_INTERVAL_MS / 1000.0, initial_delay=initial_delay)
        self._session_factory = session_factory
        self._config = config_service or ConfigService()
        self._alerts = alert_service or AlertService()
        self._readings = reading_service or ReadingService()
        self._devices = device_service or DeviceService()
        self._suppression = SuppressionWindow(self._alerts)

    def status(self) -> dict[str, Any]:
        return {"running": self.running, "interval_ms": int(self.interval * 1000)}

    async def _resolve_interval(self) -> float:
        """Re-read alert_check_interval on every (re)start."""
        try:
            async with self._session_factory() as db:
                config = await self._config.load(db)
                return config.alert_check_interval / 1000.0
        except Exception as e:
            logger.error("Error loading settings, using default interval: %s", e)
            return DEFAULT_INTERVAL_MS / 1000.0

    async def run_cycle(self, now: datetime | None = None) -> GenerationResult:
        now = now or utcnow()
        result = GenerationResult()

        async with self._session_factory() as db:
            try:
                config = await self._config.snapshot(db)
            except Exception as e:
                logger.error("Alert generator could not load settings, skipping cycle: %s", e)
                result.skipped = True
                return result

            if not config.notifications_enabled:
                result.skipped = True
                return result

            try:
                await self.check_offline_devices(db, config, now, result)
            except Exception as e:
                logger.error("Error checking offline devices: %s", e)
                await db.rollback()

            try:
                await self.check_thresholds(db, config, now, result)
            except Exception as e:
                logger.error("Error checking thresholds: %s", e)
                await db.rollback()

        if result.created:
            logger.info(
                "Alert cycle: %d offline, %d threshold alerts (%d suppressed)",
                len(result.offline_alerts), len(result.threshold_alerts), result.suppressed,
            )
        return result

    async def check_offline_devices(
        self, db: AsyncSession, config: ConfigSnapshot, now: datetime, result: GenerationResult
    ) -> None:
        cutoff = now - timedelta(minutes=config.device_offline_threshold)
        devices = await self._devices.list_devices(db)
        latest = await self._readings.latest_reading_times(db)

        for device in devices:
            last_seen = latest.get(device.id)
            if last_seen is not None and last_seen >= cutoff:
                continue

            if await self._suppression.suppress(db, device.id, AlertType.DEVICE_OFFLINE, config, now):
                result.suppressed += 1
                continue

            alert = Alert(
                device_id=device.id,
                alert_type=AlertType.DEVICE_OFFLINE.value,
                severity=AlertSeverity.CRITICAL.value,
                message=(
                    f"Device {device.name} has not sent data for over "
                    f"{config.device_offline_threshold} minutes"
                ),
                created_at=now,
            )
            await self._alerts.insert_alert(db, alert)
            result.offline_alerts.append(alert)
            logger.warning("Alert: %s is offline", device.name)

    async def check_thresholds(
        self, db: AsyncSession, config: ConfigSnapshot, now: datetime, result: GenerationResult
    ) -> None:
        since = now - timedelta(seconds=self.interval)
        rows = await self._readings.recent_readings_with_devices(db, since)

        for reading, device in rows:
            if device is None:
                logger.debug("Skipping reading %s: device %s missing", reading.id, reading.device_id)
                continue

            for candidate in evaluate_reading(reading, config, device.name):
                if await self._suppression.suppress(db, device.id, candidate.alert_type, config, now):
                    result.suppressed += 1
                    continue
                alert = _alert_from_candidate(candidate, device.id, reading.id, now)
                await self._alerts.insert_alert(db, alert)
                result.threshold_alerts.append(alert)
                logger.warning("Alert: %s", candidate.message)


def _alert_from_candidate(
    candidate: AlertCandidate, device_id: str, reading_id: int, now: datetime
) -> Alert:
    return Alert(
        device_id=device_id,
        alert_type=candidate.alert_type.value,
        severity=candidate.severity.value,
        message=candidate.message,
        reading_id=reading_id,
        phase=candidate.phase,
        value=candidate.value,
        threshold=candidate.threshold,
        created_at=now,
    )
