"""API route registration."""

from fastapi import APIRouter, Depends

from powerwatch.api.deps import get_current_admin
from powerwatch.api.routes import alerts, devices, health, readings, services, settings

api_router = APIRouter()

admin = [Depends(get_current_admin)]

api_router.include_router(health.router, tags=["health"])
api_router.include_router(readings.router, prefix="/readings", tags=["readings"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"], dependencies=admin)
api_router.include_router(alerts.router, prefix="/alerts", tags=["alerts"], dependencies=admin)
api_router.include_router(devices.router, prefix="/devices", tags=["devices"], dependencies=admin)
api_router.include_router(services.router, prefix="/services", tags=["services"], dependencies=admin)
