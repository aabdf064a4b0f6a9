"""Background service control — alert generator and external sync."""

from fastapi import APIRouter

from powerwatch.schemas.services import GeneratorControlResult, GeneratorStatus, SyncControlResult, SyncStatus
from powerwatch.services import get_alert_generator, get_sync_poller

router = APIRouter()


@router.get("/alert-generator/status", response_model=GeneratorStatus)
async def generator_status():
    return get_alert_generator().status()


@router.post("/alert-generator/start", response_model=GeneratorControlResult)
async def start_generator():
    """Start the generator; the check interval is re-read from settings."""
    generator = get_alert_generator()
    await generator.start()
    return {"message": "Alert generator started", "status": generator.status()}


@router.post("/alert-generator/stop", response_model=GeneratorControlResult)
async def stop_generator():
    generator = get_alert_generator()
    generator.stop()
    return {"message": "Alert generator stopped", "status": generator.status()}


@router.get("/sync/status", response_model=SyncStatus)
async def sync_status():
    return get_sync_poller().status()


@router.post("/sync/start", response_model=SyncControlResult)
async def start_sync():
    """Start (or restart after auto-stop) the external API poller."""
    poller = get_sync_poller()
    await poller.start()
    return {"message": "External API sync started", "status": poller.status()}


@router.post("/sync/stop", response_model=SyncControlResult)
async def stop_sync():
    poller = get_sync_poller()
    poller.stop()
    return {"message": "External API sync stopped", "status": poller.status()}
