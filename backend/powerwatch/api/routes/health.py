"""Health check."""

from fastapi import APIRouter

from powerwatch import __version__
from powerwatch.schemas.system import HealthResponse
from powerwatch.services import get_alert_generator, get_sync_poller

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight liveness check including background loop state."""
    try:
        sync_running = get_sync_poller().running
        generator_running = get_alert_generator().running
    except RuntimeError:
        sync_running = generator_running = False
    return HealthResponse(
        version=__version__,
        sync_running=sync_running,
        alert_generator_running=generator_running,
    )


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
