"""HTTP front end for the resolver (aiohttp.web).

Routes:
  - GET /healthz          liveness probe
  - GET /vin/{vin}        read-through resolution
  - GET /nhtsa/{vin}      alias of /vin/{vin}
  - GET /vehicles/{vin}   store-only lookup, 404 when absent
"""

from __future__ import annotations

import functools
import json
import logging
import math
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

from aiohttp import web

from pyvin.client import VinDecoderClient
from pyvin.config import VinConfig
from pyvin.exceptions import VinDecodeError, VinInputError, VinStoreError
from pyvin.models.outcome import Resolution
from pyvin.models.record import VehicleRecord
from pyvin.resolver import VinResolver
from pyvin.store.sqlite import SqliteVehicleStore

_logger = logging.getLogger(__name__)

RESOLVER_KEY = web.AppKey("resolver", VinResolver)

_strict_dumps = functools.partial(json.dumps, allow_nan=False)


def json_safe(value: Any) -> Any:
    """Replace NaN and infinities (which JSON cannot carry) with ``None``."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: json_safe(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [json_safe(item) for item in value]
    return value


def _json_response(body: dict[str, Any], *, status: int = 200) -> web.Response:
    return web.json_response(json_safe(body), status=status, dumps=_strict_dumps)


def _record_body(record: VehicleRecord, **extra: Any) -> dict[str, Any]:
    body = record.model_dump(mode="json")
    body.update(extra)
    return body


def _error(status: int, message: str, vin: str | None = None) -> web.Response:
    body: dict[str, Any] = {"error": message}
    if vin is not None:
        body = {"vin": vin, **body}
    return _json_response(body, status=status)


async def health(_request: web.Request) -> web.Response:
    return _json_response({"status": "ok", "time": datetime.now(UTC).isoformat()})


async def missing_vin(request: web.Request) -> web.Response:
    prefix = request.path.rstrip("/") or "/"
    return _error(400, f"missing VIN; use {prefix}/{{vin}}")


async def resolve_vin(request: web.Request) -> web.Response:
    vin = request.match_info["vin"]
    resolver = request.app[RESOLVER_KEY]
    try:
        resolution: Resolution = await resolver.resolve(vin)
    except VinInputError as exc:
        return _error(400, str(exc), vin)
    except VinDecodeError as exc:
        return _error(502, str(exc), vin)
    return _json_response(_record_body(resolution.record, source=resolution.source.value))


async def lookup_vin(request: web.Request) -> web.Response:
    vin = request.match_info["vin"]
    resolver = request.app[RESOLVER_KEY]
    try:
        record = await resolver.lookup(vin)
    except VinInputError as exc:
        return _error(400, str(exc), vin)
    except VinStoreError as exc:
        _logger.warning("Store lookup for %s failed: %s", vin, exc)
        return _error(503, str(exc), vin)
    if record is None:
        return _error(404, "vehicle not found", vin)
    return _json_response(_record_body(record))


def create_app(resolver: VinResolver) -> web.Application:
    """Build the application around an existing resolver."""
    app = web.Application()
    app[RESOLVER_KEY] = resolver
    app.router.add_get("/healthz", health)
    for prefix, handler in (("/vin", resolve_vin), ("/nhtsa", resolve_vin), ("/vehicles", lookup_vin)):
        app.router.add_get(f"{prefix}/{{vin}}", handler)
        app.router.add_get(f"{prefix}/", missing_vin)
        app.router.add_get(prefix, missing_vin)
    return app


def build_app(config: VinConfig) -> web.Application:
    """Build the application with a SQLite store and a live decoder.

    The decoder session and the store connection live for the lifetime
    of the application.
    """
    store = SqliteVehicleStore(config.db_path)
    decoder = VinDecoderClient(config)
    app = create_app(VinResolver(store, decoder, coalesce=config.coalesce))

    async def _lifecycle(_app: web.Application) -> AsyncIterator[None]:
        async with decoder:
            yield
        await store.close()

    app.cleanup_ctx.append(_lifecycle)
    return app
