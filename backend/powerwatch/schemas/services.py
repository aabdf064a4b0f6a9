"""Background service control schemas."""

from pydantic import BaseModel


class GeneratorStatus(BaseModel):
    running: bool
    interval_ms: int


class SyncStatus(BaseModel):
    running: bool
    last_success: str | None = None
    success_count: int
    error_count: int
    consecutive_errors: int
    interval_seconds: float
    api_url: str


class GeneratorControlResult(BaseModel):
    message: str
    status: GeneratorStatus


class SyncControlResult(BaseModel):
    message: str
    status: SyncStatus
