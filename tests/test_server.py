from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
from aiohttp.test_utils import TestClient, TestServer

from pyvin.config import VinConfig
from pyvin.exceptions import VinNoMatchError
from pyvin.resolver import VinResolver
from pyvin.server import build_app, create_app, json_safe

HONDA_VIN = "1HGCM82633A004352"
T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _client(store, decoder) -> TestClient:
    resolver = VinResolver(store, decoder, clock=lambda: T0)
    return TestClient(TestServer(create_app(resolver)))


@pytest.mark.asyncio
async def test_healthz(store, decoder) -> None:
    async with _client(store, decoder) as client:
        resp = await client.get("/healthz")
        body = await resp.json()

    assert resp.status == 200
    assert body["status"] == "ok"
    assert datetime.fromisoformat(body["time"]).tzinfo is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["/vin", "/nhtsa"])
async def test_resolve_route_returns_record(store, decoder, prefix: str) -> None:
    async with _client(store, decoder) as client:
        first = await client.get(f"{prefix}/{HONDA_VIN}")
        first_body = await first.json()
        second = await client.get(f"{prefix}/{HONDA_VIN}")
        second_body = await second.json()

    assert first.status == 200
    assert first_body["vin"] == HONDA_VIN
    assert first_body["make"] == "Honda"
    assert first_body["model_year"] == "2020"
    assert first_body["fuel_type"] is None
    assert first_body["raw"] == {"Make": "Honda", "Model": "Civic", "ModelYear": 2020}
    assert first_body["source"] == "decoder"
    assert second_body["source"] == "store"
    assert decoder.calls == [HONDA_VIN]


@pytest.mark.asyncio
async def test_decode_failure_is_502(store, decoder) -> None:
    decoder.responses["BADVIN0000000001"] = VinNoMatchError("Decoder status: NoRecordsFound", status="NoRecordsFound")

    async with _client(store, decoder) as client:
        resp = await client.get("/vin/BADVIN0000000001")
        body = await resp.json()

    assert resp.status == 502
    assert body == {"vin": "BADVIN0000000001", "error": "Decoder status: NoRecordsFound"}
    assert store.upserts == []


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/vin/", "/vin", "/nhtsa/", "/vehicles/"])
async def test_missing_vin_is_400(store, decoder, path: str) -> None:
    async with _client(store, decoder) as client:
        resp = await client.get(path)
        body = await resp.json()

    assert resp.status == 400
    assert "missing VIN" in body["error"]
    assert decoder.calls == []


@pytest.mark.asyncio
async def test_blank_vin_is_400(store, decoder) -> None:
    async with _client(store, decoder) as client:
        resp = await client.get("/vin/%20%20")

    assert resp.status == 400
    assert decoder.calls == []
    assert store.gets == []


@pytest.mark.asyncio
async def test_vehicles_route_is_store_only(store, decoder) -> None:
    async with _client(store, decoder) as client:
        missing = await client.get(f"/vehicles/{HONDA_VIN}")
        missing_body = await missing.json()
        await client.get(f"/vin/{HONDA_VIN}")
        found = await client.get(f"/vehicles/{HONDA_VIN}")
        found_body = await found.json()

    assert missing.status == 404
    assert missing_body["vin"] == HONDA_VIN
    assert found.status == 200
    assert found_body["make"] == "Honda"
    assert "source" not in found_body
    assert decoder.calls == [HONDA_VIN]


@pytest.mark.asyncio
async def test_non_finite_raw_values_are_served_as_null(store, decoder) -> None:
    decoder.responses[HONDA_VIN] = {"Make": "Honda", "Displacement": float("nan"), "Extra": [float("inf"), 1.5]}

    async with _client(store, decoder) as client:
        resp = await client.get(f"/vin/{HONDA_VIN}")
        text = await resp.text()

    body = json.loads(text, parse_constant=_reject_constant)
    assert resp.status == 200
    assert body["make"] == "Honda"
    assert body["raw"] == {"Make": "Honda", "Displacement": None, "Extra": [None, 1.5]}


def _reject_constant(name: str) -> None:
    raise AssertionError(f"response carried non-standard JSON constant {name}")


def test_json_safe_leaves_finite_values_alone() -> None:
    value = {"a": [1, 2.5, "x", None], "b": {"c": True}}

    assert json_safe(value) == value


@pytest.mark.asyncio
async def test_vehicles_route_store_failure_is_503(store, decoder) -> None:
    store.fail_get = True

    async with _client(store, decoder) as client:
        resp = await client.get(f"/vehicles/{HONDA_VIN}")

    assert resp.status == 503
    assert decoder.calls == []


@pytest.mark.asyncio
async def test_build_app_wires_sqlite_store_and_decoder(tmp_path) -> None:
    config = VinConfig(db_path=str(tmp_path / "vehicles.sqlite3"))

    async with TestClient(TestServer(build_app(config))) as client:
        health = await client.get("/healthz")
        missing = await client.get(f"/vehicles/{HONDA_VIN}")

    assert health.status == 200
    assert missing.status == 404
