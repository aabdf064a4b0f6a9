"""Business logic services — registry of the long-lived instances."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from powerwatch.config import settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from powerwatch.services.alert_generator import AlertGenerator
    from powerwatch.services.external_sync import ExternalSyncPoller
    from powerwatch.services.scheduler import MaintenanceScheduler

logger = logging.getLogger(__name__)

_alert_generator: AlertGenerator | None = None
_sync_poller: ExternalSyncPoller | None = None
_maintenance: MaintenanceScheduler | None = None


async def init_services(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Create the background services and start the enabled ones."""
    global _alert_generator, _sync_poller, _maintenance

    from powerwatch.services.alert_generator import AlertGenerator
    from powerwatch.services.alert_service import AlertService
    from powerwatch.services.external_sync import ExternalSyncPoller
    from powerwatch.services.scheduler import MaintenanceScheduler

    alert_service = AlertService()

    _sync_poller = ExternalSyncPoller(
        session_factory,
        api_url=settings.sync_api_url,
        interval_seconds=settings.sync_poll_interval_seconds,
        timeout_seconds=settings.sync_timeout_seconds,
        max_consecutive_errors=settings.sync_max_consecutive_errors,
    )
    _alert_generator = AlertGenerator(
        session_factory,
        alert_service=alert_service,
        initial_delay=settings.alert_generator_start_delay_seconds,
    )
    _maintenance = MaintenanceScheduler(alert_service, session_factory)

    if settings.sync_enabled:
        await _sync_poller.start()
    else:
        logger.warning("External API sync disabled (POWERWATCH_SYNC_ENABLED=false)")

    if settings.alert_generator_enabled:
        await _alert_generator.start()
    else:
        logger.warning("Alert generator disabled (POWERWATCH_ALERT_GENERATOR_ENABLED=false)")

    _maintenance.start()


async def shutdown_services() -> None:
    """Stop loops and scheduler, letting in-flight cycles finish."""
    global _alert_generator, _sync_poller, _maintenance
    if _maintenance:
        _maintenance.stop()
        _maintenance = None
    if _sync_poller:
        await _sync_poller.shutdown()
        _sync_poller = None
    if _alert_generator:
        await _alert_generator.shutdown()
        _alert_generator = None


def get_alert_generator() -> AlertGenerator:
    if _alert_generator is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _alert_generator


def get_sync_poller() -> ExternalSyncPoller:
    if _sync_poller is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _sync_poller
