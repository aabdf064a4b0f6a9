"""Reading store — binding lookup, dedup-aware ingestion, queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.models.base import utcnow
from powerwatch.models.device import Device, DeviceBinding
from powerwatch.models.reading import HARMONIC_FIELDS, READING_FIELDS, Reading
from powerwatch.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


class IngestStatus(str, Enum):
    STORED = "stored"
    DUPLICATE = "duplicate"
    UNREGISTERED = "unregistered"
    INVALID = "invalid"


@dataclass
class IngestOutcome:
    status: IngestStatus
    device: Device | None = None
    reading: Reading | None = None
    reason: str | None = None


class ReadingService:
    """Persistence for readings keyed by (device, reading_time)."""

    async def find_device_by_binding(self, db: AsyncSession, mac_address: str) -> Device | None:
        """Resolve a MAC address to its device (case-insensitive exact match)."""
        identifier = (mac_address or "").strip().upper()
        if not identifier:
            return None
        result = await db.execute(
            select(Device)
            .join(DeviceBinding, DeviceBinding.device_id == Device.id)
            .where(func.upper(DeviceBinding.mac_address) == identifier)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def latest_reading(self, db: AsyncSession, device_id: str) -> Reading | None:
        result = await db.execute(
            select(Reading)
            .where(Reading.device_id == device_id)
            .order_by(Reading.reading_time.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def latest_reading_times(self, db: AsyncSession) -> dict[str, datetime]:
        """Most recent reading_time per device, in one grouped query."""
        result = await db.execute(
            select(Reading.device_id, func.max(Reading.reading_time)).group_by(Reading.device_id)
        )
        return {device_id: latest for device_id, latest in result.all() if latest is not None}

    async def reading_exists(self, db: AsyncSession, device_id: str, reading_time: datetime) -> bool:
        result = await db.execute(
            select(Reading.id)
            .where(Reading.device_id == device_id, Reading.reading_time == reading_time)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def insert_reading(self, db: AsyncSession, reading: Reading) -> int | None:
        """Insert and commit. Returns the new id, or None on a (device, time) conflict."""
        db.add(reading)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.debug(
                "Reading for %s at %s already stored (write conflict)",
                reading.device_id, reading.reading_time,
            )
            return None
        return reading.id

    async def ingest_record(
        self,
        db: AsyncSession,
        record: Mapping[str, Any],
        default_time: datetime | None = None,
    ) -> IngestOutcome:
        """
        Store one raw reading record unless it is invalid, unknown or already present.

        Args:
            record: raw payload carrying ``mac_address``, ``reading_time`` and
                any of the electrical parameter fields.
            default_time: used when the record has no ``reading_time``. When
                None a missing timestamp makes the record invalid.
        """
        mac = record.get("mac_address")
        if not isinstance(mac, str) or not mac.strip():
            return IngestOutcome(IngestStatus.INVALID, reason="missing mac_address")

        device = await self.find_device_by_binding(db, mac)
        if device is None:
            return IngestOutcome(IngestStatus.UNREGISTERED, reason=f"MAC {mac} not registered")

        raw_time = record.get("reading_time")
        if raw_time is None or raw_time == "":
            if default_time is None:
                return IngestOutcome(IngestStatus.INVALID, device=device, reason="missing reading_time")
            reading_time = default_time
        else:
            reading_time = parse_timestamp(raw_time)
            if reading_time is None:
                return IngestOutcome(
                    IngestStatus.INVALID, device=device, reason=f"unparsable reading_time {raw_time!r}"
                )

        if await self.reading_exists(db, device.id, reading_time):
            return IngestOutcome(IngestStatus.DUPLICATE, device=device)

        reading = build_reading(device.id, reading_time, record)
        reading_id = await self.insert_reading(db, reading)
        if reading_id is None:
            return IngestOutcome(IngestStatus.DUPLICATE, device=device)
        return IngestOutcome(IngestStatus.STORED, device=device, reading=reading)

    async def recent_readings_with_devices(
        self, db: AsyncSession, since: datetime
    ) -> list[tuple[Reading, Device | None]]:
        """Readings at or after ``since``; device is None for orphaned rows."""
        result = await db.execute(
            select(Reading, Device)
            .outerjoin(Device, Device.id == Reading.device_id)
            .where(Reading.reading_time >= since)
            .order_by(Reading.reading_time.asc())
        )
        return [(reading, device) for reading, device in result.all()]

    async def purge_all(self, db: AsyncSession) -> int:
        """Delete every stored reading (admin bulk purge)."""
        result = await db.execute(delete(Reading))
        await db.commit()
        deleted = result.rowcount or 0
        logger.warning("Purged %d readings", deleted)
        return deleted


def build_reading(device_id: str, reading_time: datetime, record: Mapping[str, Any]) -> Reading:
    """Map a raw record onto a Reading; bad values become None."""
    values: dict[str, Any] = {}
    for field in READING_FIELDS:
        raw = record.get(field)
        if field in HARMONIC_FIELDS:
            values[field] = raw if isinstance(raw, (list, dict)) else None
        elif field == "transient_event_count":
            number = _safe_float(raw)
            values[field] = int(number) if number is not None else None
        else:
            values[field] = _safe_float(raw)
    return Reading(device_id=device_id, reading_time=reading_time, created_at=utcnow(), **values)


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):  # NaN / inf
        return None
    return number

