"""Tests for the reading store — binding lookup and dedup-aware ingestion."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from powerwatch.models.reading import Reading
from powerwatch.services.reading_service import IngestStatus, ReadingService, build_reading

from conftest import METER_MAC, NOW


@pytest.fixture
def readings():
    return ReadingService()


async def _count(db) -> int:
    return (await db.execute(select(func.count(Reading.id)))).scalar()


class TestBindingLookup:
    @pytest.mark.asyncio
    async def test_case_insensitive(self, readings, db_session, meter):
        device = await readings.find_device_by_binding(db_session, METER_MAC.lower())
        assert device is not None and device.id == meter.id

    @pytest.mark.asyncio
    async def test_unknown_or_blank(self, readings, db_session, meter):
        assert await readings.find_device_by_binding(db_session, "00:00:00:00:00:00") is None
        assert await readings.find_device_by_binding(db_session, "  ") is None


class TestIngest:
    @pytest.mark.asyncio
    async def test_stores_new_reading(self, readings, db_session, meter):
        outcome = await readings.ingest_record(
            db_session,
            {"mac_address": METER_MAC, "reading_time": "2026-03-01T12:00:00Z",
             "r_voltage": "231.5", "frequency": 50, "r_harmonics_voltage": [1.0, 0.5]},
        )
        assert outcome.status == IngestStatus.STORED
        assert outcome.reading.reading_time == NOW
        assert outcome.reading.r_voltage == 231.5
        assert outcome.reading.r_harmonics_voltage == [1.0, 0.5]
        assert await _count(db_session) == 1

    @pytest.mark.asyncio
    async def test_same_timestamp_stored_once(self, readings, db_session, meter):
        record = {"mac_address": METER_MAC, "reading_time": NOW.isoformat(), "r_voltage": 230}
        first = await readings.ingest_record(db_session, record)
        # Same instant in another representation
        again = await readings.ingest_record(
            db_session, {**record, "reading_time": int(NOW.timestamp() * 1000)}
        )
        assert first.status == IngestStatus.STORED
        assert again.status == IngestStatus.DUPLICATE
        assert await _count(db_session) == 1

    @pytest.mark.asyncio
    async def test_unregistered_mac(self, readings, db_session, meter):
        outcome = await readings.ingest_record(
            db_session, {"mac_address": "00:11:22:33:44:55", "reading_time": NOW.isoformat()}
        )
        assert outcome.status == IngestStatus.UNREGISTERED
        assert await _count(db_session) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("record", [
        {},
        {"mac_address": ""},
        {"mac_address": 42},
        {"mac_address": METER_MAC},
        {"mac_address": METER_MAC, "reading_time": "garbage"},
    ])
    async def test_invalid_records(self, readings, db_session, meter, record):
        outcome = await readings.ingest_record(db_session, record)
        assert outcome.status == IngestStatus.INVALID
        assert await _count(db_session) == 0

    @pytest.mark.asyncio
    async def test_missing_time_uses_default(self, readings, db_session, meter):
        outcome = await readings.ingest_record(db_session, {"mac_address": METER_MAC}, default_time=NOW)
        assert outcome.status == IngestStatus.STORED
        assert outcome.reading.reading_time == NOW

    @pytest.mark.asyncio
    async def test_write_conflict_reported_as_duplicate(self, readings, db_session, meter):
        await readings.insert_reading(db_session, build_reading(meter.id, NOW, {}))
        reading_id = await readings.insert_reading(db_session, build_reading(meter.id, NOW, {}))
        assert reading_id is None
        assert await _count(db_session) == 1


def test_build_reading_drops_bad_values():
    reading = build_reading("d", NOW, {
        "r_voltage": "abc", "y_voltage": float("nan"), "b_voltage": True,
        "transient_event_count": "3", "r_harmonics_current": "1,2,3",
    })
    assert reading.r_voltage is None
    assert reading.y_voltage is None
    assert reading.b_voltage is None
    assert reading.transient_event_count == 3
    assert reading.r_harmonics_current is None


@pytest.mark.asyncio
async def test_latest_reading_times_and_recent(readings, db_session, meter):
    for minutes in (30, 5, 1):
        db_session.add(build_reading(meter.id, NOW - timedelta(minutes=minutes), {}))
    await db_session.commit()

    latest = await readings.latest_reading_times(db_session)
    assert latest == {meter.id: NOW - timedelta(minutes=1)}

    rows = await readings.recent_readings_with_devices(db_session, NOW - timedelta(minutes=10))
    assert [r.reading_time for r, _ in rows] == [NOW - timedelta(minutes=5), NOW - timedelta(minutes=1)]
    assert all(device.id == meter.id for _, device in rows)


@pytest.mark.asyncio
async def test_purge_all(readings, db_session, meter):
    db_session.add(build_reading(meter.id, NOW, {}))
    await db_session.commit()
    assert await readings.purge_all(db_session) == 1
    assert await _count(db_session) == 0


@pytest.mark.asyncio
async def test_latest_reading_per_device(readings, db_session, meter):
    assert await readings.latest_reading(db_session, meter.id) is None

    db_session.add(build_reading(meter.id, NOW - timedelta(minutes=2), {"r_voltage": 229}))
    db_session.add(build_reading(meter.id, NOW, {"r_voltage": 231}))
    await db_session.commit()

    latest = await readings.latest_reading(db_session, meter.id)
    assert latest.reading_time == NOW
    assert latest.r_voltage == 231.0
    assert await readings.latest_reading(db_session, "other-device") is None
