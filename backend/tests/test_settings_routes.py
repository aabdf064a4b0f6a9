"""Tests for the monitoring settings routes."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_requires_admin_token(client: AsyncClient):
    assert (await client.get("/api/settings")).status_code == 401
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert (await client.get("/api/settings", headers=bad)).status_code == 401


@pytest.mark.asyncio
async def test_get_returns_defaults(client: AsyncClient, admin_headers):
    resp = await client.get("/api/settings", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["voltage_max"] == 250.0
    assert data["pf_min"] == 0.9
    assert data["alert_check_interval"] == 60000


@pytest.mark.asyncio
async def test_partial_update(client: AsyncClient, admin_headers):
    resp = await client.put("/api/settings", json={"current_max": 45}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["settings"]["current_max"] == 45.0
    assert resp.json()["settings"]["voltage_max"] == 250.0


@pytest.mark.asyncio
async def test_out_of_range_rejected_by_schema(client: AsyncClient, admin_headers):
    resp = await client.put("/api/settings", json={"pf_min": 1.5}, headers=admin_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_voltage_order_against_stored_value(client: AsyncClient, admin_headers):
    await client.put("/api/settings", json={"voltage_max": 210}, headers=admin_headers)
    resp = await client.put("/api/settings", json={"voltage_min": 220}, headers=admin_headers)
    assert resp.status_code == 400
    assert "voltage_min" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_reset(client: AsyncClient, admin_headers):
    await client.put("/api/settings", json={"device_offline_threshold": 15}, headers=admin_headers)
    resp = await client.post("/api/settings/reset", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["settings"]["device_offline_threshold"] == 60
