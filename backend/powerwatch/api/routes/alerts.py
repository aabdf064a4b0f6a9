"""Alert routes — listing, resolve workflow, cleanup."""

import math

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.api.deps import get_current_admin
from powerwatch.database import get_db
from powerwatch.schemas.alerts import (
    AlertCounts,
    AlertCreate,
    AlertList,
    AlertOut,
    BulkResolveRequest,
    BulkResolveResult,
    CleanupResult,
)
from powerwatch.services.alert_service import AlertService, alert_to_dict

router = APIRouter()
_alerts = AlertService()


@router.get("", response_model=AlertList)
async def list_alerts(
    device_id: str | None = None,
    severity: str | None = None,
    alert_type: str | None = None,
    resolved: bool | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    rows, total = await _alerts.list_alerts(
        db,
        device_id=device_id,
        severity=severity,
        alert_type=alert_type,
        resolved=resolved,
        page=page,
        per_page=per_page,
    )
    return {
        "alerts": [alert_to_dict(alert, device) for alert, device in rows],
        "pagination": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "total_pages": math.ceil(total / per_page),
        },
    }


@router.get("/counts", response_model=AlertCounts)
async def alert_counts(db: AsyncSession = Depends(get_db)):
    """Total and unresolved alerts per severity."""
    return await _alerts.counts_by_severity(db)


@router.get("/{alert_id}", response_model=AlertOut)
async def get_alert(alert_id: int, db: AsyncSession = Depends(get_db)):
    alert = await _alerts.get_alert(db, alert_id)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert_to_dict(alert)


@router.post("", response_model=AlertOut, status_code=201)
async def create_alert(body: AlertCreate, db: AsyncSession = Depends(get_db)):
    """Create an alert by hand (system_info notes, testing)."""
    data = body.model_dump()
    data["alert_type"] = body.alert_type.value
    data["severity"] = body.severity.value
    try:
        alert = await _alerts.create_alert(db, data)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return alert_to_dict(alert)


@router.patch("/{alert_id}/resolve", response_model=AlertOut)
async def resolve_alert(
    alert_id: int,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(get_current_admin),
):
    alert = await _alerts.resolve(db, alert_id, resolved_by=admin)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert_to_dict(alert)


@router.post("/bulk-resolve", response_model=BulkResolveResult)
async def bulk_resolve(
    body: BulkResolveRequest,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(get_current_admin),
):
    modified = await _alerts.bulk_resolve(db, body.alert_ids, resolved_by=admin)
    return {"message": "Alerts resolved successfully", "modified_count": modified}


@router.delete("/cleanup/{days}", response_model=CleanupResult)
async def cleanup_alerts(days: int, db: AsyncSession = Depends(get_db)):
    """Delete resolved alerts resolved more than ``days`` ago."""
    if days < 0:
        raise HTTPException(status_code=400, detail="days must not be negative")
    deleted = await _alerts.cleanup_resolved(db, days)
    return {"message": f"Cleaned up alerts older than {days} days", "deleted_count": deleted}


@router.delete("/{alert_id}")
async def delete_alert(alert_id: int, db: AsyncSession = Depends(get_db)):
    if not await _alerts.delete_alert(db, alert_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"message": "Alert deleted successfully"}
