"""Health check schema."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "powerwatch"
    sync_running: bool = False
    alert_generator_running: bool = False
