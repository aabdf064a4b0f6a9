"""Device registry routes — devices and their MAC bindings."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.database import get_db
from powerwatch.schemas.devices import BindingCreate, BindingOut, DeviceCreate, DeviceOut, DeviceUpdate
from powerwatch.services.device_service import DeviceService, binding_to_dict, device_to_dict

router = APIRouter()
_devices = DeviceService()


@router.get("", response_model=list[DeviceOut])
async def list_devices(db: AsyncSession = Depends(get_db)):
    return [device_to_dict(d) for d in await _devices.list_devices(db)]


@router.post("", response_model=DeviceOut, status_code=201)
async def create_device(body: DeviceCreate, db: AsyncSession = Depends(get_db)):
    device = await _devices.create_device(db, body.name, body.location)
    return device_to_dict(device)


@router.get("/bindings", response_model=list[BindingOut])
async def list_all_bindings(db: AsyncSession = Depends(get_db)):
    return [binding_to_dict(b) for b in await _devices.list_bindings(db)]


@router.delete("/bindings/{binding_id}")
async def delete_binding(binding_id: int, db: AsyncSession = Depends(get_db)):
    if not await _devices.delete_binding(db, binding_id):
        raise HTTPException(status_code=404, detail="Binding not found")
    return {"message": "Binding removed"}


@router.get("/{device_id}", response_model=DeviceOut)
async def get_device(device_id: str, db: AsyncSession = Depends(get_db)):
    device = await _devices.get_device(db, device_id)
    if not device:
        raise HTTPException(status_code=404, detail="Device not found")
    return device_to_dict(device)


@router.put("/{device_id}", response_model=DeviceOut)
async def update_device(device_id: str, body: DeviceUpdate, db: AsyncSession = Depends(get_db)):
    device = await _devices.update_device(db, device_id, body.name, body.location)
    if not device:
        raise HTTPException(status_code=404, detail="Device not found")
    return device_to_dict(device)


@router.delete("/{device_id}")
async def delete_device(device_id: str, db: AsyncSession = Depends(get_db)):
    """Remove the device with its readings, bindings and alerts."""
    if not await _devices.delete_device(db, device_id):
        raise HTTPException(status_code=404, detail="Device not found")
    return {"message": "Device deleted"}


@router.get("/{device_id}/bindings", response_model=list[BindingOut])
async def list_device_bindings(device_id: str, db: AsyncSession = Depends(get_db)):
    if not await _devices.get_device(db, device_id):
        raise HTTPException(status_code=404, detail="Device not found")
    return [binding_to_dict(b) for b in await _devices.list_bindings(db, device_id)]


@router.post("/{device_id}/bindings", response_model=BindingOut, status_code=201)
async def add_binding(device_id: str, body: BindingCreate, db: AsyncSession = Depends(get_db)):
    try:
        binding = await _devices.add_binding(db, device_id, body.mac_address)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FileExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return binding_to_dict(binding)
