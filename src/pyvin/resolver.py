"""Read-through VIN resolution.

The resolver is the single point where store and decoder failures are
observed and turned into results:

* store read failure  -> treated as a miss, reported as a warning;
* decoder failure     -> raised, nothing written;
* store write failure -> the decoded record is still returned, with the
  failure attached as a warning.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from pyvin._api._common import require_vin
from pyvin.exceptions import VinDecodeError, VinStoreError
from pyvin.models.outcome import DecodeOutcome, Resolution, ResolutionSource
from pyvin.models.record import VehicleRecord
from pyvin.normalize import normalize_record
from pyvin.store.base import VehicleStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Decoder(Protocol):
    """Anything that can decode a VIN (usually :class:`VinDecoderClient`)."""

    async def decode(self, vin: str) -> DecodeOutcome:
        ...


@dataclass(slots=True)
class _InFlight:
    """A decode shared by every concurrent resolution of one VIN."""

    task: asyncio.Task[Resolution]
    waiters: int = 0


class VinResolver:
    """Resolve VINs through a store, falling back to a decoder.

    Usage::

        async with VinDecoderClient(config) as decoder:
            resolver = VinResolver(SqliteVehicleStore(config.db_path), decoder)
            resolution = await resolver.resolve("1HGCM82633A004352")

    Parameters
    ----------
    store : VehicleStore
        Where decoded records are cached.
    decoder : Decoder
        The authoritative source consulted on a miss.
    coalesce : bool
        Share one decode between concurrent misses for the same VIN.
    clock : callable
        Source of the ``updated_at`` stamp for freshly decoded records.
    """

    def __init__(
        self,
        store: VehicleStore,
        decoder: Decoder,
        *,
        coalesce: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._decoder = decoder
        self._coalesce = coalesce
        self._clock = clock
        self._inflight: dict[str, _InFlight] = {}

    @property
    def store(self) -> VehicleStore:
        return self._store

    async def lookup(self, vin: str) -> VehicleRecord | None:
        """Store-only read; never calls the decoder.

        Store failures propagate as :class:`VinStoreError`.
        """
        require_vin(vin)
        return await self._store.get(vin)

    async def resolve(self, vin: str) -> Resolution:
        """Return the record for *vin*, decoding and caching it on a miss.

        Raises
        ------
        VinInputError
            *vin* is empty; neither the store nor the decoder is called.
        VinDecodeError
            The store had no record and the decoder failed.
        """
        require_vin(vin)

        read_warning: VinStoreError | None = None
        try:
            record = await self._store.get(vin)
        except VinStoreError as exc:
            _logger.warning("Store read for %s failed, decoding instead: %s", vin, exc)
            read_warning = exc
        else:
            if record is not None:
                _logger.debug("Store hit for %s", vin)
                return Resolution(record=record, source=ResolutionSource.STORE)

        if not self._coalesce:
            return await self._decode_and_store(vin, read_warning)
        return await self._join(vin, read_warning)

    async def _join(self, vin: str, read_warning: VinStoreError | None) -> Resolution:
        flight = self._inflight.get(vin)
        if flight is None or flight.task.done() or flight.task.cancelling():
            task = asyncio.create_task(self._decode_and_store(vin, read_warning))
            flight = _InFlight(task=task)
            self._inflight[vin] = flight
            task.add_done_callback(functools.partial(self._forget, vin, flight))
        else:
            _logger.debug("Joining in-flight decode for %s", vin)

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            # The last waiter to leave takes the shared request down with it;
            # later callers start a fresh decode.
            if flight.waiters == 1 and not flight.task.done():
                flight.task.cancel()
                self._forget(vin, flight, flight.task)
            raise
        finally:
            flight.waiters -= 1

    def _forget(self, vin: str, flight: _InFlight, _task: asyncio.Task[Resolution]) -> None:
        if self._inflight.get(vin) is flight:
            del self._inflight[vin]

    async def _decode_and_store(self, vin: str, read_warning: VinStoreError | None) -> Resolution:
        try:
            outcome = await self._decoder.decode(vin)
        except VinDecodeError as exc:
            exc.vin = exc.vin or vin
            _logger.debug("Decode for %s failed: %s", vin, exc)
            raise

        record = normalize_record(vin, outcome.raw, entry=outcome.entry, clock=self._clock)
        if record.is_empty:
            _logger.debug("Decoder returned no data for %s; caching empty record", vin)

        warning = read_warning
        try:
            await self._store.upsert(record)
        except VinStoreError as exc:
            _logger.warning("Caching %s failed, returning decoded record anyway: %s", vin, exc)
            warning = exc

        return Resolution(record=record, source=ResolutionSource.DECODER, warning=warning)
