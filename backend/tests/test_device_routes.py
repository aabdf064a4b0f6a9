"""Tests for device and binding routes."""

import pytest
from httpx import AsyncClient

from conftest import METER_MAC


@pytest.mark.asyncio
async def test_device_crud(client: AsyncClient, admin_headers):
    resp = await client.post("/api/devices", json={"name": "Feeder", "location": "Hall B"}, headers=admin_headers)
    assert resp.status_code == 201
    device_id = resp.json()["id"]

    resp = await client.put(f"/api/devices/{device_id}", json={"name": "Feeder 1"}, headers=admin_headers)
    assert resp.json()["name"] == "Feeder 1"
    assert resp.json()["location"] == "Hall B"

    listed = await client.get("/api/devices", headers=admin_headers)
    assert [d["id"] for d in listed.json()] == [device_id]

    assert (await client.delete(f"/api/devices/{device_id}", headers=admin_headers)).status_code == 200
    assert (await client.get(f"/api/devices/{device_id}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_binding_lifecycle(client: AsyncClient, meter, admin_headers):
    resp = await client.post(
        f"/api/devices/{meter.id}/bindings", json={"mac_address": "aa-bb-cc-00-11-22"}, headers=admin_headers
    )
    assert resp.status_code == 201
    assert resp.json()["mac_address"] == "AA:BB:CC:00:11:22"
    binding_id = resp.json()["id"]

    listed = await client.get(f"/api/devices/{meter.id}/bindings", headers=admin_headers)
    assert len(listed.json()) == 2

    assert (await client.delete(f"/api/devices/bindings/{binding_id}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/devices/bindings/{binding_id}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_binding_errors(client: AsyncClient, meter, admin_headers):
    dup = await client.post(f"/api/devices/{meter.id}/bindings", json={"mac_address": METER_MAC}, headers=admin_headers)
    assert dup.status_code == 409

    bad = await client.post(f"/api/devices/{meter.id}/bindings", json={"mac_address": "nope"}, headers=admin_headers)
    assert bad.status_code == 422

    ghost = await client.post("/api/devices/ghost/bindings", json={"mac_address": "11:22:33:44:55:66"},
                              headers=admin_headers)
    assert ghost.status_code == 404
