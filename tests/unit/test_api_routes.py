"""Integration tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from lancenet.api.app import create_app
from lancenet.api.runtime import ApiState
from lancenet.config import Settings
from lancenet.domain import models as dm
from lancenet.repository import JsonForceRepository


def _make_app(tmp_path, **overrides):
    def factory() -> ApiState:
        settings = Settings(data_dir=tmp_path, **overrides)
        return ApiState(settings=settings)

    app = create_app(state_factory=factory)
    transport = ASGITransport(app=app)
    return app, transport


def _unit_payload(unit_id: str, bv: int, flag: str, name: str) -> dict[str, object]:
    return {
        "id": unit_id,
        "name": name,
        "bv": bv,
        "c3Type": name,
        "linked": True,
        "equipment": [{"name": name, "flags": [flag]}],
    }


async def _create_force(client: AsyncClient) -> int:
    response = await client.post("/forces", json={"name": "Command Lance"})
    assert response.status_code == 201
    payload = response.json()
    assert payload["unit_count"] == 0
    assert payload["c3Networks"] == []
    return payload["id"]


async def _add_lance(client: AsyncClient, force_id: int) -> None:
    units = [
        _unit_payload("m", 100, "F_C3M", "C3 Master"),
        _unit_payload("s1", 80, "F_C3S", "C3 Slave"),
        _unit_payload("s2", 90, "F_C3S", "C3 Slave"),
    ]
    for unit in units:
        response = await client.post(f"/forces/{force_id}/units", json=unit)
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_force_lifecycle_via_api(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/health")
        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "ok"
        assert payload["detect_hierarchy_cycles"] is True

        force_id = await _create_force(client)
        await _add_lance(client, force_id)

        response = await client.post(
            f"/forces/{force_id}/units", json=_unit_payload("m", 1, "F_C3M", "C3 Master")
        )
        assert response.status_code == 400

        response = await client.get("/forces")
        assert [entry["unit_count"] for entry in response.json()] == [3]

        response = await client.get(f"/forces/{force_id}")
        assert response.status_code == 200
        assert [unit["id"] for unit in response.json()["units"]] == ["m", "s1", "s2"]

    stored = JsonForceRepository(tmp_path).load(dm.ForceID(force_id))
    assert len(stored.units) == 3


@pytest.mark.asyncio
async def test_connect_and_topology_endpoints(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        force_id = await _create_force(client)
        await _add_lance(client, force_id)

        response = await client.get(f"/forces/{force_id}/units/m/pins/0/targets")
        assert response.status_code == 200
        assert response.json() == {"s1": [0], "s2": [0]}

        for slave in ("s1", "s2"):
            response = await client.post(
                f"/forces/{force_id}/networks/connect",
                json={"source_id": "m", "source_index": 0, "target_id": slave, "target_index": 0},
            )
            assert response.status_code == 200
            assert response.json()["valid"] is True

        networks = response.json()["networks"]
        assert len(networks) == 1
        assert networks[0]["masterId"] == "m"
        assert networks[0]["members"] == ["s1", "s2"]

        response = await client.post(
            f"/forces/{force_id}/networks/connect",
            json={"source_id": "s1", "source_index": 0, "target_id": "s2", "target_index": 0},
        )
        rejected = response.json()
        assert rejected["valid"] is False
        assert rejected["reason"] == "cannot link a slave pin to a slave pin"

        response = await client.get(f"/forces/{force_id}/networks")
        topology = response.json()
        network_id = topology["networks"][0]["id"]
        assert topology["top_level"] == [network_id]
        assert topology["pins"]["m:0"]["connected"] is True
        assert topology["pins"]["s1:0"]["color"] == topology["networks"][0]["color"]
        assert topology["labels"][network_id] == "C3 Master (2 members: s1, s2)"

        response = await client.get(f"/forces/{force_id}/tax")
        tax = response.json()
        assert tax["units"]["m"] == {"bv": 100, "tax": 14}
        assert tax["c3_tax"] == 14
        assert tax["total_bv"] == 270 + 14

        response = await client.post(
            f"/forces/{force_id}/networks/{network_id}/remove-unit", json={"unit_id": "s1"}
        )
        assert response.json()["networks"][0]["members"] == ["s2"]

        response = await client.delete(f"/forces/{force_id}/networks/{network_id}")
        assert response.json()["networks"] == []

        response = await client.delete(f"/forces/{force_id}/networks")
        assert response.status_code == 200
        assert response.json()["networks"] == []


@pytest.mark.asyncio
async def test_missing_force_and_unit_return_404(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/forces/99")
        assert response.status_code == 404

        response = await client.get("/forces/99/tax")
        assert response.status_code == 404

        force_id = await _create_force(client)
        response = await client.get(f"/forces/{force_id}/units/ghost/pins/0/targets")
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_network_limits_follow_settings(tmp_path):
    app, transport = _make_app(tmp_path, enforce_network_limits=True)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        force_id = await _create_force(client)
        response = await client.post(
            f"/forces/{force_id}/units", json=_unit_payload("m", 100, "F_C3M", "C3 Master")
        )
        assert response.status_code == 201
        for index in range(4):
            response = await client.post(
                f"/forces/{force_id}/units",
                json=_unit_payload(f"s{index}", 50, "F_C3S", "C3 Slave"),
            )
            assert response.status_code == 201

        results = []
        for index in range(4):
            response = await client.post(
                f"/forces/{force_id}/networks/connect",
                json={
                    "source_id": "m",
                    "source_index": 0,
                    "target_id": f"s{index}",
                    "target_index": 0,
                },
            )
            results.append(response.json())

        assert [result["valid"] for result in results] == [True, True, True, False]
        assert results[-1]["reason"] == "network is full (max 3 units)"


@pytest.mark.asyncio
async def test_unit_id_with_member_separator_rejected(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        force_id = await _create_force(client)
        response = await client.post(
            f"/forces/{force_id}/units", json=_unit_payload("a:1", 100, "F_C3S", "C3 Slave")
        )
        assert response.status_code == 422
