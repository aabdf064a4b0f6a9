"""Reading routes — direct ingestion from meters and admin purge."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.api.deps import get_current_admin
from powerwatch.database import get_db
from powerwatch.models.base import utcnow
from powerwatch.schemas.readings import PurgeResult, ReadingIn, ReadingStored
from powerwatch.services.reading_service import IngestStatus, ReadingService

logger = logging.getLogger(__name__)

router = APIRouter()
_readings = ReadingService()


@router.post("", response_model=ReadingStored, status_code=201)
async def ingest_reading(body: ReadingIn, db: AsyncSession = Depends(get_db)):
    """
    Accept one reading posted by a meter.

    The MAC address must be bound to a device. A missing ``reading_time``
    defaults to the time of receipt; a reading already stored for the same
    device and time is acknowledged without being written again.
    """
    received_at = utcnow()
    outcome = await _readings.ingest_record(db, body.model_dump(), default_time=received_at)

    if outcome.status == IngestStatus.UNREGISTERED:
        raise HTTPException(status_code=403, detail="Device not registered. Please register the device first.")
    if outcome.status == IngestStatus.INVALID:
        raise HTTPException(status_code=400, detail=outcome.reason)

    if outcome.status == IngestStatus.DUPLICATE:
        payload = ReadingStored(
            stored=False,
            message="Reading already stored",
            device_id=outcome.device.id,
            reading_time=str(body.reading_time or received_at.isoformat()),
        )
        return JSONResponse(status_code=200, content=payload.model_dump())

    reading = outcome.reading
    logger.debug("Stored direct reading %s for %s", reading.id, outcome.device.name)
    return ReadingStored(
        stored=True,
        message="Data received successfully",
        device_id=outcome.device.id,
        reading_id=reading.id,
        reading_time=reading.reading_time.isoformat(),
    )


@router.delete("/all", response_model=PurgeResult)
async def purge_readings(
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(get_current_admin),
):
    deleted = await _readings.purge_all(db)
    logger.warning("All readings purged by %s", admin)
    return {"message": "All readings deleted", "deleted_count": deleted}
