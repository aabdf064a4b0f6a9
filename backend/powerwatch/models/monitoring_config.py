"""Singleton threshold configuration, editable by admins at runtime."""

from datetime import datetime

from sqlalchemy import Boolean, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from powerwatch.models.base import Base, UTCDateTime, utcnow

DEFAULTS = {
    "voltage_max": 250.0,
    "voltage_min": 200.0,
    "current_max": 30.0,
    "pf_min": 0.90,
    "notifications_enabled": True,
    "email_alerts_enabled": True,
    "alert_check_interval": 60_000,  # ms
    "device_offline_threshold": 60,  # minutes
}

# Inclusive (min, max) per numeric field
RANGES = {
    "voltage_max": (200.0, 300.0),
    "voltage_min": (150.0, 240.0),
    "current_max": (1.0, 100.0),
    "pf_min": (0.5, 1.0),
    "alert_check_interval": (10_000, 3_600_000),
    "device_offline_threshold": (5, 1440),
}


class MonitoringConfig(Base):
    __tablename__ = "monitoring_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    voltage_max: Mapped[float] = mapped_column(Float, default=DEFAULTS["voltage_max"], nullable=False)
    voltage_min: Mapped[float] = mapped_column(Float, default=DEFAULTS["voltage_min"], nullable=False)
    current_max: Mapped[float] = mapped_column(Float, default=DEFAULTS["current_max"], nullable=False)
    pf_min: Mapped[float] = mapped_column(Float, default=DEFAULTS["pf_min"], nullable=False)
    notifications_enabled: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULTS["notifications_enabled"], nullable=False
    )
    email_alerts_enabled: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULTS["email_alerts_enabled"], nullable=False
    )
    alert_check_interval: Mapped[int] = mapped_column(
        Integer, default=DEFAULTS["alert_check_interval"], nullable=False
    )
    device_offline_threshold: Mapped[int] = mapped_column(
        Integer, default=DEFAULTS["device_offline_threshold"], nullable=False
    )
    # Unique flag so the database itself refuses a second row
    singleton: Mapped[bool] = mapped_column(Boolean, default=True, unique=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<MonitoringConfig(voltage={self.voltage_min}-{self.voltage_max}, "
            f"current_max={self.current_max}, pf_min={self.pf_min})>"
        )
