"""Alert store — suppression lookup, resolve workflow, cleanup."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from powerwatch.models.alert import Alert, AlertSeverity
from powerwatch.models.base import utcnow
from powerwatch.models.device import Device

logger = logging.getLogger(__name__)


class AlertService:
    """Queries and mutations on the alerts table."""

    async def find_unresolved_alert(
        self, db: AsyncSession, device_id: str, alert_type: str
    ) -> Alert | None:
        """Newest unresolved alert of this type for the device, however old."""
        result = await db.execute(
            select(Alert)
            .where(
                Alert.device_id == device_id,
                Alert.alert_type == alert_type,
                Alert.resolved.is_(False),
            )
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert_alert(self, db: AsyncSession, alert: Alert) -> int:
        if alert.created_at is None:
            alert.created_at = utcnow()
        db.add(alert)
        await db.commit()
        return alert.id

    async def create_alert(self, db: AsyncSession, data: dict[str, Any]) -> Alert:
        """Manual creation (testing / system_info). The device must exist."""
        device = await db.get(Device, data["device_id"])
        if not device:
            raise LookupError(f"Device {data['device_id']} not found")
        alert = Alert(
            device_id=device.id,
            alert_type=data["alert_type"],
            severity=data.get("severity") or AlertSeverity.INFO.value,
            message=data["message"],
            value=data.get("value"),
            threshold=data.get("threshold"),
            reading_id=data.get("reading_id"),
        )
        await self.insert_alert(db, alert)
        return alert

    async def get_alert(self, db: AsyncSession, alert_id: int) -> Alert | None:
        return await db.get(Alert, alert_id)

    async def list_alerts(
        self,
        db: AsyncSession,
        *,
        device_id: str | None = None,
        severity: str | None = None,
        alert_type: str | None = None,
        resolved: bool | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[list[tuple[Alert, Device | None]], int]:
        """Filtered page of alerts (newest first) joined with their device, plus total count."""
        filters = []
        if device_id:
            filters.append(Alert.device_id == device_id)
        if severity:
            filters.append(Alert.severity == severity)
        if alert_type:
            filters.append(Alert.alert_type == alert_type)
        if resolved is not None:
            filters.append(Alert.resolved.is_(resolved))

        total = (await db.execute(select(func.count(Alert.id)).where(*filters))).scalar() or 0
        result = await db.execute(
            select(Alert, Device)
            .outerjoin(Device, Device.id == Alert.device_id)
            .where(*filters)
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return [(alert, device) for alert, device in result.all()], total

    async def counts_by_severity(self, db: AsyncSession) -> dict[str, dict[str, int]]:
        result = await db.execute(
            select(
                Alert.severity,
                func.count(Alert.id),
                func.sum(case((Alert.resolved.is_(False), 1), else_=0)),
            ).group_by(Alert.severity)
        )
        counts = {s.value: {"total": 0, "unresolved": 0} for s in AlertSeverity}
        for severity, total, unresolved in result.all():
            counts[severity] = {"total": total, "unresolved": int(unresolved or 0)}
        return counts

    async def resolve(self, db: AsyncSession, alert_id: int, resolved_by: str | None) -> Alert | None:
        alert = await db.get(Alert, alert_id)
        if not alert:
            return None
        alert.resolved = True
        alert.resolved_at = utcnow()
        alert.resolved_by = resolved_by
        await db.commit()
        await db.refresh(alert)
        return alert

    async def bulk_resolve(self, db: AsyncSession, alert_ids: list[int], resolved_by: str | None) -> int:
        """Resolve the still-unresolved alerts among ``alert_ids``; returns how many changed."""
        result = await db.execute(
            update(Alert)
            .where(Alert.id.in_(alert_ids), Alert.resolved.is_(False))
            .values(resolved=True, resolved_at=utcnow(), resolved_by=resolved_by)
        )
        await db.commit()
        return result.rowcount or 0

    async def delete_alert(self, db: AsyncSession, alert_id: int) -> bool:
        alert = await db.get(Alert, alert_id)
        if not alert:
            return False
        await db.delete(alert)
        await db.commit()
        return True

    async def cleanup_resolved(self, db: AsyncSession, days: int) -> int:
        """Delete resolved alerts whose resolution is older than ``days``."""
        cutoff = utcnow() - timedelta(days=days)
        result = await db.execute(
            delete(Alert).where(Alert.resolved.is_(True), Alert.resolved_at <= cutoff)
        )
        deleted = result.rowcount or 0
        await db.commit()
        if deleted:
            logger.info("Cleaned up %d resolved alerts older than %d days", deleted, days)
        return deleted


def alert_to_dict(alert: Alert, device: Device | None = None) -> dict[str, Any]:
    return {
        "id": alert.id,
        "device_id": alert.device_id,
        "device_name": device.name if device else None,
        "alert_type": alert.alert_type,
        "severity": alert.severity,
        "message": alert.message,
        "reading_id": alert.reading_id,
        "phase": alert.phase,
        "value": alert.value,
        "threshold": alert.threshold,
        "resolved": bool(alert.resolved),
        "resolved_at": alert.resolved_at.isoformat() if alert.resolved_at else None,
        "resolved_by": alert.resolved_by,
        "created_at": alert.created_at.isoformat() if alert.created_at else None,
    }
