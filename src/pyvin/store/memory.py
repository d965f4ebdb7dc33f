"""Deterministic in-memory vehicle store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pyvin.models.record import VehicleRecord
from pyvin.store.policy import should_replace

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MemoryVehicleStore:
    """Dict-backed store.

    Records are deep-copied on the way in and out, so callers never share
    a ``raw`` dict with the store.  Useful for tests and short-lived processes.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._records: dict[str, VehicleRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, vin: object) -> bool:
        return vin in self._records

    async def get(self, vin: str) -> VehicleRecord | None:
        record = self._records.get(vin)
        return record.model_copy(deep=True) if record is not None else None

    async def upsert(self, record: VehicleRecord) -> None:
        """Insert or replace *record* (last-write-wins on ``updated_at``)."""
        incoming = record.model_copy(deep=True)
        if incoming.updated_at is None:
            incoming = incoming.model_copy(update={"updated_at": self._clock()})
        async with self._lock:
            stored = self._records.get(incoming.vin)
            if stored is not None and not should_replace(
                stored_at=stored.updated_at,
                incoming_at=incoming.updated_at,
            ):
                _logger.debug("Ignoring older write for %s", incoming.vin)
                return
            self._records[incoming.vin] = incoming

    async def close(self) -> None:
        return None
