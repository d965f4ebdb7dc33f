from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from pyvin.cli import build_parser, main
from pyvin.normalize import normalize_record
from pyvin.store.sqlite import SqliteVehicleStore

VIN = "1HGCM82633A004352"


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_lookup_missing_vin_exits_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--db", str(tmp_path / "vehicles.sqlite3"), "lookup", VIN])

    assert code == 1
    assert "not found" in capsys.readouterr().err


def test_lookup_prints_stored_record(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = str(tmp_path / "vehicles.sqlite3")

    async def _seed() -> None:
        store = SqliteVehicleStore(path)
        await store.upsert(normalize_record(VIN, {"Make": "Honda"}, decoded_at=datetime(2026, 1, 1, tzinfo=UTC)))
        await store.close()

    asyncio.run(_seed())

    code = main(["--db", path, "lookup", VIN, "--json"])

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["vin"] == VIN
    assert body["make"] == "Honda"
    assert body["raw"] == {"Make": "Honda"}


def test_resolve_empty_vin_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--db", str(tmp_path / "vehicles.sqlite3"), "resolve", ""])

    assert code == 2
    assert "non-empty" in capsys.readouterr().err


def test_lookup_empty_vin_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--db", str(tmp_path / "vehicles.sqlite3"), "lookup", "  "])

    assert code == 2
    assert "non-empty" in capsys.readouterr().err
