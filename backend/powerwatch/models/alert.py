"""Alerts derived from readings and device liveness."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from powerwatch.models.base import Base, UTCDateTime, utcnow


class AlertType(str, Enum):
    OVER_VOLTAGE = "over_voltage"
    UNDER_VOLTAGE = "under_voltage"
    OVER_CURRENT = "over_current"
    LOW_POWER_FACTOR = "low_power_factor"
    DEVICE_OFFLINE = "device_offline"
    SYSTEM_INFO = "system_info"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class Alert(Base):
    __tablename__ = "alerts"
    __table_args__ = (
        # Duplicate suppression lookup
        Index(
            "ix_alerts_suppression",
            "device_id", "alert_type", "resolved", "created_at",
        ),
        Index("ix_alerts_severity_resolved", "severity", "resolved"),
        Index("ix_alerts_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(
        String, ForeignKey("devices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    alert_type: Mapped[str] = mapped_column(String(32), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default=AlertSeverity.INFO.value)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    reading_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("readings.id", ondelete="SET NULL"), nullable=True
    )
    phase: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)  # R, Y, B
    value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    threshold: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Alert(id={self.id}, device_id={self.device_id}, "
            f"type='{self.alert_type}', resolved={self.resolved})>"
        )
