"""Singleton monitoring configuration — load/create, update, reset."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.models.monitoring_config import DEFAULTS, RANGES, MonitoringConfig

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = tuple(DEFAULTS.keys())


class ConfigValidationError(ValueError):
    """Rejected configuration change (out of range or inconsistent)."""


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable copy of the configuration, taken once per cycle."""
    voltage_max: float
    voltage_min: float
    current_max: float
    pf_min: float
    notifications_enabled: bool
    alert_check_interval: int  # ms
    device_offline_threshold: int  # minutes

    @classmethod
    def from_model(cls, config: MonitoringConfig) -> "ConfigSnapshot":
        return cls(
            voltage_max=config.voltage_max,
            voltage_min=config.voltage_min,
            current_max=config.current_max,
            pf_min=config.pf_min,
            notifications_enabled=bool(config.notifications_enabled),
            alert_check_interval=config.alert_check_interval,
            device_offline_threshold=config.device_offline_threshold,
        )


class ConfigService:
    """Access to the one MonitoringConfig row."""

    async def load(self, db: AsyncSession) -> MonitoringConfig:
        """Return the configuration, creating the default row if absent."""
        config = await self._get(db)
        if config is not None:
            return config

        db.add(MonitoringConfig(singleton=True))
        try:
            await db.commit()
        except IntegrityError:
            # Another session created it first
            await db.rollback()
        config = await self._get(db)
        if config is None:
            raise RuntimeError("Monitoring configuration could not be created")
        logger.info("Created default monitoring configuration")
        return config

    async def snapshot(self, db: AsyncSession) -> ConfigSnapshot:
        return ConfigSnapshot.from_model(await self.load(db))

    async def update(self, db: AsyncSession, changes: dict[str, Any]) -> MonitoringConfig:
        """Apply a partial update. Unknown keys and None values are ignored."""
        config = await self.load(db)
        updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}

        for field, value in updates.items():
            bounds = RANGES.get(field)
            if bounds and not (bounds[0] <= value <= bounds[1]):
                raise ConfigValidationError(
                    f"{field} must be between {bounds[0]:g} and {bounds[1]:g}"
                )

        voltage_min = updates.get("voltage_min", config.voltage_min)
        voltage_max = updates.get("voltage_max", config.voltage_max)
        if voltage_min >= voltage_max:
            raise ConfigValidationError("voltage_min must be less than voltage_max")

        for field, value in updates.items():
            setattr(config, field, value)
        await db.commit()
        await db.refresh(config)
        if updates:
            logger.info("Monitoring configuration updated: %s", ", ".join(sorted(updates)))
        return config

    async def reset(self, db: AsyncSession) -> MonitoringConfig:
        """Restore every editable field to its default."""
        config = await self.load(db)
        for field, value in DEFAULTS.items():
            setattr(config, field, value)
        await db.commit()
        await db.refresh(config)
        logger.info("Monitoring configuration reset to defaults")
        return config

    async def _get(self, db: AsyncSession) -> MonitoringConfig | None:
        result = await db.execute(
            select(MonitoringConfig).where(MonitoringConfig.singleton.is_(True))
        )
        return result.scalar_one_or_none()


def config_to_dict(config: MonitoringConfig) -> dict[str, Any]:
    return {
        "voltage_max": config.voltage_max,
        "voltage_min": config.voltage_min,
        "current_max": config.current_max,
        "pf_min": config.pf_min,
        "notifications_enabled": bool(config.notifications_enabled),
        "email_alerts_enabled": bool(config.email_alerts_enabled),
        "alert_check_interval": config.alert_check_interval,
        "device_offline_threshold": config.device_offline_threshold,
        "updated_at": config.updated_at.isoformat() if config.updated_at else None,
    }
