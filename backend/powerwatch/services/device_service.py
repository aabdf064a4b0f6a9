"""Device registry and MAC address bindings."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.models.alert import Alert
from powerwatch.models.device import Device, DeviceBinding
from powerwatch.models.reading import Reading
from powerwatch.utils.mac import normalize_mac

logger = logging.getLogger(__name__)


class DeviceService:
    """CRUD for devices and their bindings."""

    async def list_devices(self, db: AsyncSession) -> list[Device]:
        result = await db.execute(select(Device).order_by(Device.created_at.desc()))
        return list(result.scalars().all())

    async def get_device(self, db: AsyncSession, device_id: str) -> Device | None:
        return await db.get(Device, device_id)

    async def create_device(self, db: AsyncSession, name: str, location: str = "") -> Device:
        device = Device(id=str(uuid.uuid4()), name=name.strip(), location=(location or "").strip())
        db.add(device)
        await db.commit()
        await db.refresh(device)
        logger.info("Device created: %s (%s)", device.name, device.id)
        return device

    async def update_device(
        self, db: AsyncSession, device_id: str, name: str | None, location: str | None
    ) -> Device | None:
        device = await db.get(Device, device_id)
        if not device:
            return None
        if name is not None:
            device.name = name.strip()
        if location is not None:
            device.location = location.strip()
        await db.commit()
        await db.refresh(device)
        return device

    async def delete_device(self, db: AsyncSession, device_id: str) -> bool:
        """Delete a device together with its readings, bindings and alerts."""
        device = await db.get(Device, device_id)
        if not device:
            return False

        await db.execute(delete(Alert).where(Alert.device_id == device_id))
        await db.execute(delete(Reading).where(Reading.device_id == device_id))
        await db.execute(delete(DeviceBinding).where(DeviceBinding.device_id == device_id))
        await db.delete(device)
        await db.commit()
        logger.info("Device deleted: %s (%s)", device.name, device_id)
        return True

    async def add_binding(self, db: AsyncSession, device_id: str, mac_address: str) -> DeviceBinding:
        """
        Bind a MAC address to a device.

        Raises:
            ValueError: malformed MAC address.
            LookupError: unknown device.
            FileExistsError: the pair is already bound.
        """
        mac = normalize_mac(mac_address)
        device = await db.get(Device, device_id)
        if not device:
            raise LookupError(f"Device {device_id} not found")

        binding = DeviceBinding(device_id=device_id, mac_address=mac)
        db.add(binding)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise FileExistsError(f"MAC address {mac} is already assigned to this device")
        await db.refresh(binding)
        logger.info("Bound %s to device %s", mac, device.name)
        return binding

    async def list_bindings(self, db: AsyncSession, device_id: str | None = None) -> list[DeviceBinding]:
        stmt = select(DeviceBinding).order_by(DeviceBinding.created_at.desc())
        if device_id:
            stmt = stmt.where(DeviceBinding.device_id == device_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def delete_binding(self, db: AsyncSession, binding_id: int) -> bool:
        binding = await db.get(DeviceBinding, binding_id)
        if not binding:
            return False
        await db.delete(binding)
        await db.commit()
        return True


def device_to_dict(device: Device) -> dict[str, Any]:
    return {
        "id": device.id,
        "name": device.name,
        "location": device.location,
        "created_at": device.created_at.isoformat() if device.created_at else None,
    }


def binding_to_dict(binding: DeviceBinding) -> dict[str, Any]:
    return {
        "id": binding.id,
        "device_id": binding.device_id,
        "mac_address": binding.mac_address,
        "created_at": binding.created_at.isoformat() if binding.created_at else None,
    }
