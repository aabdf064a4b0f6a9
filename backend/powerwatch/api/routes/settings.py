"""Monitoring configuration routes — thresholds and alert timing."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.database import get_db
from powerwatch.schemas.settings import MonitoringConfigOut, MonitoringConfigResult, MonitoringConfigUpdate
from powerwatch.services.config_service import ConfigService, ConfigValidationError, config_to_dict

router = APIRouter()
_config = ConfigService()


@router.get("", response_model=MonitoringConfigOut)
async def get_settings(db: AsyncSession = Depends(get_db)):
    """Current configuration (created with defaults on first access)."""
    return config_to_dict(await _config.load(db))


@router.put("", response_model=MonitoringConfigResult)
async def update_settings(body: MonitoringConfigUpdate, db: AsyncSession = Depends(get_db)):
    """Partial update. The alert generator picks up the new interval on restart."""
    try:
        config = await _config.update(db, body.model_dump(exclude_none=True))
    except ConfigValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Settings updated successfully", "settings": config_to_dict(config)}


@router.post("/reset", response_model=MonitoringConfigResult)
async def reset_settings(db: AsyncSession = Depends(get_db)):
    config = await _config.reset(db)
    return {"message": "Settings reset to defaults", "settings": config_to_dict(config)}
