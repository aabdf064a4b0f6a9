"""Electrical parameter snapshot reported by a three-phase energy meter."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from powerwatch.models.base import Base, UTCDateTime, utcnow

PHASES = ("r", "y", "b")

# Per-phase quantities, stored as <phase>_<quantity>
PHASE_QUANTITIES = (
    "voltage",
    "voltage_line_to_line",
    "current",
    "active_power",
    "reactive_power",
    "apparent_power",
    "power_factor",
    "thd_voltage",
    "thd_current",
    "harmonics_voltage",
    "harmonics_current",
    "voltage_neutral",
)

HARMONIC_FIELDS = frozenset(
    f"{phase}_{q}" for phase in PHASES for q in ("harmonics_voltage", "harmonics_current")
)

COMMON_FIELDS = (
    "ry_voltage",
    "yb_voltage",
    "br_voltage",
    "neutral_current",
    "voltage_unbalance",
    "current_unbalance",
    "frequency",
    "total_energy_kwh",
    "total_energy_kvah",
    "total_energy_kvarh",
    "transient_event_count",
    "temperature",
    "humidity",
)

READING_FIELDS = tuple(f"{p}_{q}" for p in PHASES for q in PHASE_QUANTITIES) + COMMON_FIELDS


class Reading(Base):
    """One timestamped measurement; (device_id, reading_time) is unique."""
    __tablename__ = "readings"
    __table_args__ = (
        UniqueConstraint("device_id", "reading_time", name="uq_reading_device_time"),
        Index("ix_readings_reading_time", "reading_time"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(
        String, ForeignKey("devices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reading_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    # Phase R
    r_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_voltage_line_to_line: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_active_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_reactive_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_apparent_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_power_factor: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_thd_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_thd_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    r_harmonics_voltage: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    r_harmonics_current: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    r_voltage_neutral: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Phase Y
    y_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_voltage_line_to_line: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_active_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_reactive_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_apparent_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_power_factor: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_thd_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_thd_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    y_harmonics_voltage: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    y_harmonics_current: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    y_voltage_neutral: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Phase B
    b_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_voltage_line_to_line: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_active_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_reactive_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_apparent_power: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_power_factor: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_thd_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_thd_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    b_harmonics_voltage: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    b_harmonics_current: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    b_voltage_neutral: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Line-to-line voltages
    ry_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    yb_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    br_voltage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Common parameters
    neutral_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    voltage_unbalance: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    current_unbalance: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    frequency: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total_energy_kwh: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total_energy_kvah: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total_energy_kvarh: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    transient_event_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    humidity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Reading(id={self.id}, device_id={self.device_id}, at={self.reading_time})>"
