"""Shared helpers for decoder endpoint modules.

It is internal to pyvin and may change at any time.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pyvin._transport import Transport
from pyvin.config import VinConfig
from pyvin.exceptions import VinDecodeError, VinInputError

_logger = logging.getLogger(__name__)


def require_vin(vin: str) -> str:
    """Return *vin* unchanged, or raise :class:`VinInputError` when blank."""
    if not isinstance(vin, str) or not vin.strip():
        raise VinInputError("VIN must be a non-empty string")
    return vin


def vin_path_segment(vin: str) -> str:
    """Percent-encode a VIN for use as a single URL path segment."""
    return quote(vin, safe="")


async def get_decoder_json(
    *,
    config: VinConfig,
    transport: Transport,
    vin: str,
    url: str,
) -> Any:
    """GET *url* with the configured credential headers.

    Transport failures are re-raised with the VIN attached.
    """
    try:
        return await transport.get_json(url, config.credential_headers())
    except VinDecodeError as exc:
        exc.vin = exc.vin or vin
        _logger.debug("Decoder request for %s failed: %s", vin, exc)
        raise


def first_mapping(items: Any) -> tuple[dict[str, Any], int]:
    """Pick the first dict entry of a result list.

    Returns ``(entry, count)`` where *count* is the number of entries in
    the list; ``({}, 0)`` when the list is missing or empty.
    """
    if not isinstance(items, list):
        return {}, 0
    for item in items:
        if isinstance(item, dict):
            return dict(item), len(items)
    return {}, len(items)
