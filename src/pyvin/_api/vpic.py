"""NHTSA vPIC decoder.

Endpoint:
  - /api/vehicles/DecodeVinValues/{vin}?format=json

The response is a flat ``Results`` array with one entry per decoded
vehicle.  vPIC carries no business status: any well-formed response is
a successful decode, even with zero entries.
"""

from __future__ import annotations

import logging
from typing import Any

from pyvin._api._common import first_mapping, get_decoder_json, vin_path_segment
from pyvin._transport import Transport
from pyvin.config import VinConfig
from pyvin.exceptions import VinTransportError
from pyvin.models.outcome import DecodeOutcome

_logger = logging.getLogger(__name__)

_ENDPOINT = "/api/vehicles/DecodeVinValues"


def build_url(config: VinConfig, vin: str) -> str:
    return f"{config.decoder_base_url}{_ENDPOINT}/{vin_path_segment(vin)}?format=json"


def parse_response(vin: str, body: Any, *, url: str = "") -> DecodeOutcome:
    """Keep the whole vPIC body as ``raw`` and pick its first result."""
    if not isinstance(body, dict) or "Results" not in body:
        raise VinTransportError(
            "Unexpected vPIC response: missing 'Results'",
            vin=vin,
            status_code=200,
            url=url,
        )
    entry, count = first_mapping(body.get("Results"))
    return DecodeOutcome(vin=vin, raw=body, entry=entry, result_count=count)


async def fetch_vpic(config: VinConfig, transport: Transport, vin: str) -> DecodeOutcome:
    """Decode *vin* through vPIC."""
    url = build_url(config, vin)
    body = await get_decoder_json(config=config, transport=transport, vin=vin, url=url)
    outcome = parse_response(vin, body, url=url)
    _logger.debug("vPIC decoded %s results=%d", vin, outcome.result_count)
    return outcome
