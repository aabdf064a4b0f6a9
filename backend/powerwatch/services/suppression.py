"""Duplicate-suppression window for generated alerts."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.models.alert import Alert, AlertType

if TYPE_CHECKING:
    from powerwatch.services.alert_service import AlertService
    from powerwatch.services.config_service import ConfigSnapshot

logger = logging.getLogger(__name__)

# Lookback in minutes; device_offline follows the configured threshold
WINDOW_MINUTES: dict[AlertType, int] = {
    AlertType.OVER_VOLTAGE: 5,
    AlertType.UNDER_VOLTAGE: 5,
    AlertType.OVER_CURRENT: 5,
    AlertType.LOW_POWER_FACTOR: 10,
}


class SuppressionWindow:
    """
    Withholds a new alert while one of the same kind is still unresolved.

    An unresolved alert raised within the window suppresses repeats, and it
    keeps doing so after the window has passed: suppression depends on the
    alert still being open, not on how long ago it was raised. Resolving it
    lets the next breach through at once. Alerts are only read here.
    """

    def __init__(self, alert_service: AlertService):
        self._alerts = alert_service

    @staticmethod
    def window_for(alert_type: AlertType | str, config: ConfigSnapshot) -> timedelta:
        alert_type = AlertType(alert_type)
        if alert_type == AlertType.DEVICE_OFFLINE:
            return timedelta(minutes=config.device_offline_threshold)
        return timedelta(minutes=WINDOW_MINUTES.get(alert_type, 5))

    async def find_active(
        self, db: AsyncSession, device_id: str, alert_type: AlertType | str
    ) -> Alert | None:
        return await self._alerts.find_unresolved_alert(db, device_id, AlertType(alert_type).value)

    async def suppress(
        self,
        db: AsyncSession,
        device_id: str,
        alert_type: AlertType | str,
        config: ConfigSnapshot,
        now: datetime,
    ) -> bool:
        """True when a candidate must be discarded."""
        active = await self.find_active(db, device_id, alert_type)
        if active is None:
            return False
        window_start = now - self.window_for(alert_type, config)
        logger.debug(
            "Suppressed duplicate %s for device %s: alert %s open %s",
            AlertType(alert_type).value, device_id, active.id,
            "within the window" if active.created_at >= window_start else "since before the window",
        )
        return True
