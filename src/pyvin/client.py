"""Async client for the external VIN decoder."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from pyvin._api._common import require_vin
from pyvin._api.jdpower import fetch_jdpower
from pyvin._api.vpic import fetch_vpic
from pyvin._constants import DECODER_JDPOWER, DECODER_NHTSA
from pyvin._transport import HttpTransport, Transport
from pyvin.config import VinConfig
from pyvin.exceptions import VinError
from pyvin.models.outcome import DecodeOutcome

_logger = logging.getLogger(__name__)

_FETCHERS: dict[str, Callable[[VinConfig, Transport, str], Awaitable[DecodeOutcome]]] = {
    DECODER_NHTSA: fetch_vpic,
    DECODER_JDPOWER: fetch_jdpower,
}


class VinDecoderClient:
    """Async client for the configured decoder flavor.

    Each :meth:`decode` call issues exactly one request; retry policy
    belongs to the caller.

    Usage::

        async with VinDecoderClient(config) as client:
            outcome = await client.decode("1HGCM82633A004352")
    """

    def __init__(
        self,
        config: VinConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> VinConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> VinDecoderClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(
            self._http_session,
            timeout=self._config.timeout,
            redact_keys=(self._config.username_header, self._config.password_header),
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise VinError("Client not initialized. Use 'async with VinDecoderClient(...) as client:'")
        return self._transport

    async def decode(self, vin: str) -> DecodeOutcome:
        """Decode *vin* with the configured decoder.

        Raises
        ------
        VinInputError
            *vin* is empty; no request is made.
        VinDecodeError
            Transport failure, timeout, non-200 status, malformed body, or
            a business rejection from the decoder.
        """
        require_vin(vin)
        transport = self._require_transport()
        fetch = _FETCHERS[self._config.decoder]
        _logger.debug("Decoding %s via %s", vin, self._config.decoder)
        return await fetch(self._config, transport, vin)
