"""Structural store interface used by the resolver."""

from __future__ import annotations

from typing import Protocol

from pyvin.models.record import VehicleRecord


class VehicleStore(Protocol):
    """Key-value table of vehicle records keyed by VIN.

    ``get`` is an exact-key lookup returning ``None`` on a miss; a
    present record is always valid (no expiry).  ``upsert`` creates or
    atomically replaces the record for its VIN.  Both raise
    :class:`~pyvin.exceptions.VinStoreError` on persistence failures.
    """

    async def get(self, vin: str) -> VehicleRecord | None:
        ...

    async def upsert(self, record: VehicleRecord) -> None:
        ...

    async def close(self) -> None:
        ...
