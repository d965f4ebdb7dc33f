"""JD Power used-powersports decoder.

Endpoint:
  - /UsedPowersportsService.svc/VINV2/{vin}

The response nests its results under ``GetModelsByVINV2Result`` together
with a business ``Status``.  Anything other than ``ExactMatch`` (for
example ``NoRecordsFound``) is a rejection, even on HTTP 200.
"""

from __future__ import annotations

import logging
from typing import Any

from pyvin._api._common import first_mapping, get_decoder_json, vin_path_segment
from pyvin._constants import JDPOWER_AFFIRMATIVE_STATUS
from pyvin._transport import Transport
from pyvin.config import VinConfig
from pyvin.exceptions import VinNoMatchError, VinTransportError
from pyvin.models.outcome import DecodeOutcome

_logger = logging.getLogger(__name__)

_ENDPOINT = "/UsedPowersportsService.svc/VINV2"
_RESULT_KEY = "GetModelsByVINV2Result"


def build_url(config: VinConfig, vin: str) -> str:
    return f"{config.decoder_base_url}{_ENDPOINT}/{vin_path_segment(vin)}"


def parse_response(vin: str, body: Any, *, url: str = "") -> DecodeOutcome:
    """Validate the business status and pick the first model.

    The whole body is kept as ``raw``; the picked model is the ``entry``.

    ``Models`` is preferred; ``VintageModels`` is used when it is empty.
    """
    result = body.get(_RESULT_KEY) if isinstance(body, dict) else None
    if not isinstance(result, dict):
        raise VinTransportError(
            f"Unexpected JD Power response: missing {_RESULT_KEY!r}",
            vin=vin,
            status_code=200,
            url=url,
        )

    status = str(result.get("Status") or "")
    if status != JDPOWER_AFFIRMATIVE_STATUS:
        raise VinNoMatchError(
            f"Decoder status: {status or '<empty>'}",
            vin=vin,
            status=status,
            url=url,
        )

    entry, count = first_mapping(result.get("Models"))
    if count == 0:
        entry, count = first_mapping(result.get("VintageModels"))
    return DecodeOutcome(vin=vin, raw=body, entry=entry, status=status, result_count=count)


async def fetch_jdpower(config: VinConfig, transport: Transport, vin: str) -> DecodeOutcome:
    """Decode *vin* through JD Power."""
    url = build_url(config, vin)
    body = await get_decoder_json(config=config, transport=transport, vin=vin, url=url)
    outcome = parse_response(vin, body, url=url)
    _logger.debug("JD Power decoded %s status=%s models=%d", vin, outcome.status, outcome.result_count)
    return outcome
