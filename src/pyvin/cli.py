"""Command-line entry point.

Usage::

    pyvin serve [--host HOST] [--port PORT]
    pyvin resolve VIN [--json]
    pyvin lookup VIN

Configuration comes from ``PYVIN_*`` environment variables; see
:meth:`pyvin.config.VinConfig.from_env`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from aiohttp import web

from pyvin._api._common import require_vin
from pyvin.client import VinDecoderClient
from pyvin.config import VinConfig
from pyvin.exceptions import VinDecodeError, VinError, VinInputError
from pyvin.models.record import CANONICAL_FIELDS, VehicleRecord
from pyvin.resolver import VinResolver
from pyvin.server import build_app, json_safe
from pyvin.store.sqlite import SqliteVehicleStore


def _print_record(record: VehicleRecord, *, json_mode: bool, source: str | None = None) -> None:
    if json_mode:
        body: dict[str, Any] = record.model_dump(mode="json")
        if source is not None:
            body["source"] = source
        print(json.dumps(json_safe(body), indent=2, ensure_ascii=False, allow_nan=False))
        return
    print(f"VIN: {record.vin}" + (f"  ({source})" if source else ""))
    for name in CANONICAL_FIELDS:
        value = getattr(record, name)
        print(f"  {name}: {value if value is not None else '-'}")
    if record.updated_at is not None:
        print(f"  updated_at: {record.updated_at.isoformat()}")


async def _resolve(config: VinConfig, vin: str, *, json_mode: bool) -> int:
    store = SqliteVehicleStore(config.db_path)
    try:
        async with VinDecoderClient(config) as decoder:
            resolver = VinResolver(store, decoder, coalesce=config.coalesce)
            resolution = await resolver.resolve(vin)
    finally:
        await store.close()
    _print_record(resolution.record, json_mode=json_mode, source=resolution.source.value)
    if resolution.warning is not None:
        print(f"warning: {resolution.warning}", file=sys.stderr)
    return 0


async def _lookup(config: VinConfig, vin: str, *, json_mode: bool) -> int:
    require_vin(vin)
    store = SqliteVehicleStore(config.db_path)
    try:
        record = await store.get(vin)
    finally:
        await store.close()
    if record is None:
        print(f"{vin}: not found", file=sys.stderr)
        return 1
    _print_record(record, json_mode=json_mode)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyvin", description="Read-through VIN decoding with a local cache.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--db", help="SQLite database path (default: $PYVIN_DB_PATH or pyvin.sqlite3)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", help="Bind address (default: $PYVIN_HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Listen port (default: $PYVIN_PORT or 8080)")

    resolve = sub.add_parser("resolve", help="Resolve a VIN, decoding and caching it on a miss")
    resolve.add_argument("vin")
    resolve.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")

    lookup = sub.add_parser("lookup", help="Look a VIN up in the local store only")
    lookup.add_argument("vin")
    lookup.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.command == "serve":
        if args.host:
            overrides["host"] = args.host
        if args.port:
            overrides["port"] = args.port

    try:
        config = VinConfig.from_env(**overrides)
        if args.command == "serve":
            print(f"pyvin listening on http://{config.host}:{config.port}")
            web.run_app(build_app(config), host=config.host, port=config.port, print=None)
            return 0
        if args.command == "resolve":
            return asyncio.run(_resolve(config, args.vin, json_mode=args.json_mode))
        return asyncio.run(_lookup(config, args.vin, json_mode=args.json_mode))
    except VinInputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except VinDecodeError as exc:
        print(f"error: decoding {exc.vin or args.vin} failed: {exc}", file=sys.stderr)
        return 1
    except VinError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
