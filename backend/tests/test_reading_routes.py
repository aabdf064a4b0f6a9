"""Tests for direct reading ingestion and purge."""

import pytest
from httpx import AsyncClient

from conftest import METER_MAC


@pytest.mark.asyncio
async def test_ingest_stores_reading(client: AsyncClient, meter):
    resp = await client.post("/api/readings", json={
        "mac_address": METER_MAC.lower(),
        "reading_time": "2026-03-01T12:00:00Z",
        "r_voltage": 231.2,
        "frequency": 50.01,
    })
    assert resp.status_code == 201
    data = resp.json()
    assert data["stored"] is True
    assert data["device_id"] == meter.id
    assert data["reading_time"].startswith("2026-03-01T12:00:00")


@pytest.mark.asyncio
async def test_same_reading_twice_is_acknowledged(client: AsyncClient, meter):
    body = {"mac_address": METER_MAC, "reading_time": "2026-03-01T12:00:00Z"}
    assert (await client.post("/api/readings", json=body)).status_code == 201
    resp = await client.post("/api/readings", json=body)
    assert resp.status_code == 200
    assert resp.json()["stored"] is False


@pytest.mark.asyncio
async def test_missing_time_defaults_to_receipt(client: AsyncClient, meter):
    resp = await client.post("/api/readings", json={"mac_address": METER_MAC, "r_current": 5})
    assert resp.status_code == 201
    assert resp.json()["reading_id"] is not None


@pytest.mark.asyncio
async def test_unregistered_device_forbidden(client: AsyncClient, meter):
    resp = await client.post("/api/readings", json={"mac_address": "00:00:00:00:00:42"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_bad_timestamp_rejected(client: AsyncClient, meter):
    resp = await client.post("/api/readings", json={"mac_address": METER_MAC, "reading_time": "soon"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_mac_required(client: AsyncClient):
    assert (await client.post("/api/readings", json={"r_voltage": 230})).status_code == 422


@pytest.mark.asyncio
async def test_purge_requires_admin(client: AsyncClient, meter, admin_headers):
    await client.post("/api/readings", json={"mac_address": METER_MAC})
    assert (await client.delete("/api/readings/all")).status_code == 401

    resp = await client.delete("/api/readings/all", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["deleted_count"] == 1
