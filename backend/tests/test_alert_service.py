"""Tests for the alert store — listing, resolve workflow, cleanup."""

from datetime import timedelta

import pytest

from powerwatch.models.alert import Alert, AlertType
from powerwatch.models.base import utcnow
from powerwatch.services.alert_service import AlertService

from conftest import NOW


@pytest.fixture
def alerts():
    return AlertService()


def _alert(device_id, alert_type=AlertType.OVER_VOLTAGE, severity="critical", **kw):
    return Alert(device_id=device_id, alert_type=alert_type.value, severity=severity,
                 message=f"{alert_type.value} alert", **kw)


@pytest.mark.asyncio
async def test_insert_fills_defaults(alerts, db_session, meter):
    alert = _alert(meter.id)
    await alerts.insert_alert(db_session, alert)
    assert alert.id is not None
    assert alert.created_at is not None
    assert alert.resolved is False


@pytest.mark.asyncio
async def test_find_unresolved_ignores_age_and_resolved(alerts, db_session, meter):
    old = _alert(meter.id, created_at=NOW - timedelta(days=3))
    fresh_resolved = _alert(meter.id, created_at=NOW - timedelta(minutes=2), resolved=True)
    other_type = _alert(meter.id, AlertType.UNDER_VOLTAGE, severity="warning", created_at=NOW)
    for alert in (old, fresh_resolved, other_type):
        await alerts.insert_alert(db_session, alert)

    assert await alerts.find_unresolved_alert(db_session, meter.id, "over_voltage") == old
    assert await alerts.find_unresolved_alert(db_session, meter.id, "low_power_factor") is None
    assert await alerts.find_unresolved_alert(db_session, "dev-x", "over_voltage") is None


@pytest.mark.asyncio
async def test_create_alert_requires_device(alerts, db_session):
    with pytest.raises(LookupError):
        await alerts.create_alert(db_session, {"device_id": "ghost", "alert_type": "system_info", "message": "x"})


@pytest.mark.asyncio
async def test_list_filters_and_paginates(alerts, db_session, meter):
    for i in range(5):
        await alerts.insert_alert(db_session, _alert(meter.id, created_at=NOW + timedelta(minutes=i)))
    await alerts.insert_alert(db_session, _alert(meter.id, AlertType.DEVICE_OFFLINE, created_at=NOW))

    rows, total = await alerts.list_alerts(db_session, alert_type="over_voltage", page=1, per_page=2)
    assert total == 5
    assert len(rows) == 2
    assert rows[0][0].created_at == NOW + timedelta(minutes=4)
    assert rows[0][1].name == "Main Meter"


@pytest.mark.asyncio
async def test_counts_by_severity(alerts, db_session, meter):
    await alerts.insert_alert(db_session, _alert(meter.id, severity="critical"))
    await alerts.insert_alert(db_session, _alert(meter.id, severity="critical", resolved=True))
    await alerts.insert_alert(db_session, _alert(meter.id, AlertType.LOW_POWER_FACTOR, severity="warning"))

    counts = await alerts.counts_by_severity(db_session)
    assert counts["critical"] == {"total": 2, "unresolved": 1}
    assert counts["warning"] == {"total": 1, "unresolved": 1}
    assert counts["info"] == {"total": 0, "unresolved": 0}


@pytest.mark.asyncio
async def test_resolve_records_who_and_when(alerts, db_session, meter):
    alert = _alert(meter.id)
    await alerts.insert_alert(db_session, alert)

    resolved = await alerts.resolve(db_session, alert.id, resolved_by="admin")
    assert resolved.resolved is True
    assert resolved.resolved_by == "admin"
    assert resolved.resolved_at is not None
    assert await alerts.resolve(db_session, 9999, resolved_by="admin") is None


@pytest.mark.asyncio
async def test_bulk_resolve_counts_only_changed(alerts, db_session, meter):
    a, b = _alert(meter.id), _alert(meter.id, resolved=True)
    await alerts.insert_alert(db_session, a)
    await alerts.insert_alert(db_session, b)
    assert await alerts.bulk_resolve(db_session, [a.id, b.id, 12345], resolved_by="admin") == 1


@pytest.mark.asyncio
async def test_cleanup_deletes_only_old_resolved(alerts, db_session, meter):
    long_ago = utcnow() - timedelta(days=40)
    old_resolved = _alert(meter.id, resolved=True, resolved_at=long_ago)
    recent_resolved = _alert(meter.id, resolved=True, resolved_at=utcnow())
    old_open = _alert(meter.id, created_at=long_ago)
    for alert in (old_resolved, recent_resolved, old_open):
        await alerts.insert_alert(db_session, alert)

    assert await alerts.cleanup_resolved(db_session, 30) == 1
    assert await alerts.get_alert(db_session, recent_resolved.id) is not None
    assert await alerts.get_alert(db_session, old_open.id) is not None


@pytest.mark.asyncio
async def test_delete_alert(alerts, db_session, meter):
    alert = _alert(meter.id)
    await alerts.insert_alert(db_session, alert)
    assert await alerts.delete_alert(db_session, alert.id) is True
    assert await alerts.delete_alert(db_session, alert.id) is False
