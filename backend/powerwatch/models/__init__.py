"""SQLAlchemy ORM models for PowerWatch."""

from powerwatch.models.base import Base
from powerwatch.models.device import Device, DeviceBinding
from powerwatch.models.reading import Reading
from powerwatch.models.alert import Alert, AlertSeverity, AlertType
from powerwatch.models.monitoring_config import MonitoringConfig

__all__ = [
    "Base",
    "Device",
    "DeviceBinding",
    "Reading",
    "Alert",
    "AlertSeverity",
    "AlertType",
    "MonitoringConfig",
]
