"""SQLite-backed vehicle store."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pyvin.exceptions import VinStoreError
from pyvin.models.record import CANONICAL_FIELDS, VehicleRecord

_logger = logging.getLogger(__name__)

_COLUMNS: tuple[str, ...] = ("vin", *CANONICAL_FIELDS, "raw", "updated_at")
_UPDATE_COLS = [c for c in _COLUMNS if c != "vin"]

SELECT_SQL = "SELECT " + ", ".join(_COLUMNS) + " FROM vehicles WHERE vin = ?"
UPSERT_SQL = (
    "INSERT INTO vehicles ("
    + ", ".join(_COLUMNS)
    + ") VALUES ("
    + ", ".join(["?"] * len(_COLUMNS))
    + ") ON CONFLICT(vin) DO UPDATE SET "
    + ", ".join(f"{c}=excluded.{c}" for c in _UPDATE_COLS)
    # Last-write-wins: an older decode never replaces a newer one.
    + " WHERE excluded.updated_at >= vehicles.updated_at"
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _format_ts(value: datetime) -> str:
    # Fixed-width so that text comparison in SQL orders like time.
    return value.astimezone(UTC).isoformat(timespec="microseconds")


class SqliteVehicleStore:
    """SQLite-backed store with one row per VIN.

    Blocking sqlite calls run in a worker thread; a lock serializes them
    on the shared connection.  Upserts are a single
    ``INSERT ... ON CONFLICT DO UPDATE`` statement, so concurrent writers
    for the same VIN converge on the newest ``updated_at``.
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db_path = db_path
        self._clock = clock
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._lock:
                if db_path != ":memory:":
                    self._conn.execute("PRAGMA journal_mode=WAL")
                self._create_schema()
        except sqlite3.Error as exc:
            raise VinStoreError(f"Cannot open store at {db_path}: {exc}", operation="open") from exc

    # ── Schema ─────────────────────────────────────────────────────

    def _create_schema(self) -> None:
        canonical_cols = "".join(f"                {name:<16} TEXT,\n" for name in CANONICAL_FIELDS)
        self._conn.executescript(
            "CREATE TABLE IF NOT EXISTS vehicles (\n"
            "                vin              TEXT PRIMARY KEY,\n"
            f"{canonical_cols}"
            "                raw              TEXT NOT NULL DEFAULT '{}',\n"
            "                updated_at       TEXT NOT NULL\n"
            "            );\n"
        )
        self._conn.commit()

    # ── Helpers ────────────────────────────────────────────────────

    def _row_params(self, record: VehicleRecord) -> tuple[Any, ...]:
        try:
            raw = json.dumps(record.raw, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise VinStoreError(
                f"raw payload for {record.vin} is not JSON-serializable: {exc}",
                vin=record.vin,
                operation="upsert",
            ) from exc
        updated_at = record.updated_at or self._clock()
        return (
            record.vin,
            *(getattr(record, name) for name in CANONICAL_FIELDS),
            raw,
            _format_ts(updated_at),
        )

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> VehicleRecord:
        d = dict(row)
        vin = d["vin"]
        try:
            raw = json.loads(d.pop("raw") or "{}")
        except (TypeError, json.JSONDecodeError) as exc:
            raise VinStoreError(f"Stored raw payload for {vin} is not JSON", vin=vin, operation="get") from exc
        if not isinstance(raw, dict):
            raise VinStoreError(f"Stored raw payload for {vin} is not a mapping", vin=vin, operation="get")
        try:
            return VehicleRecord(raw=raw, **d)
        except ValidationError as exc:
            raise VinStoreError(f"Stored row for {vin} is invalid: {exc}", vin=vin, operation="get") from exc

    # ── Blocking operations ────────────────────────────────────────

    def _get_sync(self, vin: str) -> VehicleRecord | None:
        with self._lock:
            row = self._conn.execute(SELECT_SQL, (vin,)).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def _upsert_sync(self, params: tuple[Any, ...]) -> None:
        with self._lock, self._conn:
            self._conn.execute(UPSERT_SQL, params)

    # ── Public API ─────────────────────────────────────────────────

    async def get(self, vin: str) -> VehicleRecord | None:
        try:
            return await asyncio.to_thread(self._get_sync, vin)
        except sqlite3.Error as exc:
            raise VinStoreError(f"Reading {vin} failed: {exc}", vin=vin, operation="get") from exc

    async def upsert(self, record: VehicleRecord) -> None:
        """Insert or replace *record* in one statement."""
        params = self._row_params(record)
        try:
            await asyncio.to_thread(self._upsert_sync, params)
        except sqlite3.Error as exc:
            raise VinStoreError(f"Writing {record.vin} failed: {exc}", vin=record.vin, operation="upsert") from exc
        _logger.debug("Stored %s", record.vin)

    async def close(self) -> None:
        with self._lock:
            self._conn.close()
