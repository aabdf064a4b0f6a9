"""Alert schemas."""

from pydantic import BaseModel, Field

from powerwatch.models.alert import AlertSeverity, AlertType


class AlertOut(BaseModel):
    id: int
    device_id: str
    device_name: str | None = None
    alert_type: str
    severity: str
    message: str
    reading_id: int | None = None
    phase: str | None = None
    value: float | None = None
    threshold: float | None = None
    resolved: bool = False
    resolved_at: str | None = None
    resolved_by: str | None = None
    created_at: str | None = None


class Pagination(BaseModel):
    total: int
    page: int
    per_page: int
    total_pages: int


class AlertList(BaseModel):
    alerts: list[AlertOut]
    pagination: Pagination


class SeverityCount(BaseModel):
    total: int = 0
    unresolved: int = 0


class AlertCounts(BaseModel):
    critical: SeverityCount
    warning: SeverityCount
    info: SeverityCount


class AlertCreate(BaseModel):
    """Manual alert creation (normally the generator creates alerts)."""
    device_id: str
    alert_type: AlertType
    severity: AlertSeverity = AlertSeverity.INFO
    message: str = Field(min_length=1)
    value: float | None = None
    threshold: float | None = None
    reading_id: int | None = None


class BulkResolveRequest(BaseModel):
    alert_ids: list[int] = Field(min_length=1)


class BulkResolveResult(BaseModel):
    message: str
    modified_count: int


class CleanupResult(BaseModel):
    message: str
    deleted_count: int
