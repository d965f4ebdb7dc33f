from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyvin.exceptions import VinStoreError
from pyvin.models.outcome import DecodeOutcome
from pyvin.models.record import VehicleRecord
from pyvin.store.memory import MemoryVehicleStore

HONDA_VIN = "1HGCM82633A004352"
HONDA_RAW: dict[str, Any] = {"Make": "Honda", "Model": "Civic", "ModelYear": 2020}


@dataclass
class FakeDecoder:
    """Decoder double: returns canned payloads or raises canned errors."""

    responses: dict[str, Any] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    delay: float = 0.0

    async def decode(self, vin: str) -> DecodeOutcome:
        self.calls.append(vin)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.get(vin, {})
        if isinstance(response, Exception):
            raise response
        return DecodeOutcome(vin=vin, raw=response, result_count=1 if response else 0)


@dataclass
class FlakyStore:
    """Memory store whose reads and writes can be made to fail."""

    inner: MemoryVehicleStore = field(default_factory=MemoryVehicleStore)
    fail_get: bool = False
    fail_upsert: bool = False
    gets: list[str] = field(default_factory=list)
    upserts: list[VehicleRecord] = field(default_factory=list)

    async def get(self, vin: str) -> VehicleRecord | None:
        self.gets.append(vin)
        if self.fail_get:
            raise VinStoreError("disk on fire", vin=vin, operation="get")
        return await self.inner.get(vin)

    async def upsert(self, record: VehicleRecord) -> None:
        self.upserts.append(record)
        if self.fail_upsert:
            raise VinStoreError("disk full", vin=record.vin, operation="upsert")
        await self.inner.upsert(record)

    async def close(self) -> None:
        await self.inner.close()


@pytest.fixture
def decoder() -> FakeDecoder:
    return FakeDecoder(responses={HONDA_VIN: dict(HONDA_RAW)})


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()
