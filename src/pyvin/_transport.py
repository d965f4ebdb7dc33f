"""HTTP transport for decoder requests."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyvin._constants import USER_AGENT
from pyvin._redact import redact_for_log
from pyvin.exceptions import VinTimeoutError, VinTransportError

_logger = logging.getLogger(__name__)


def _preview(payload: bytes) -> str:
    return payload[:200].decode("utf-8", errors="replace")


class Transport(Protocol):
    """Structural transport interface used by the decoder client.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, headers: Mapping[str, str]) -> Any:
        ...


class HttpTransport:
    """Single-shot JSON GET over aiohttp with a total timeout.

    Every failure is raised as :class:`VinTransportError` (or its
    :class:`VinTimeoutError` subclass); there are no retries.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float,
        redact_keys: tuple[str, ...] = (),
    ) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._redact_keys = redact_keys

    async def get_json(self, url: str, headers: Mapping[str, str]) -> Any:
        request_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
            **headers,
        }

        _logger.debug("GET %s headers=%s", url, redact_for_log(request_headers, extra_keys=self._redact_keys))

        try:
            async with self._http.get(url, headers=request_headers, timeout=self._timeout) as resp:
                payload = await resp.read()
                status = resp.status
                charset = resp.charset or "utf-8"
        except asyncio.TimeoutError as exc:
            raise VinTimeoutError(
                f"Decoder did not answer within {self._timeout.total}s",
                url=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise VinTransportError(
                f"Request to decoder failed: {exc}",
                url=url,
            ) from exc

        if status != 200:
            raise VinTransportError(
                f"HTTP {status} from decoder: {_preview(payload)}",
                status_code=status,
                url=url,
            )

        try:
            return json.loads(payload.decode(charset))
        except (UnicodeDecodeError, LookupError) as exc:
            raise VinTransportError(
                f"Undecodable {charset} body from decoder: {_preview(payload)}",
                status_code=200,
                url=url,
            ) from exc
        except json.JSONDecodeError as exc:
            raise VinTransportError(
                f"Invalid JSON from decoder: {_preview(payload)}",
                status_code=200,
                url=url,
            ) from exc
