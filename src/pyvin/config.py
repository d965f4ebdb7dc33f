"""Client configuration for pyvin."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

from pyvin._constants import DECODER_JDPOWER, DECODER_NHTSA, DEFAULT_BASE_URLS, DEFAULT_TIMEOUT
from pyvin.exceptions import VinConfigError

_logger = logging.getLogger(__name__)

# Flavors whose endpoints expect the credential headers.
_AUTHENTICATED_DECODERS = frozenset({DECODER_JDPOWER})


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class VinConfig:
    """Resolver, decoder and server configuration.

    Parameters
    ----------
    decoder : str
        Decoder flavor, ``"nhtsa"`` (flat vPIC results) or ``"jdpower"``
        (nested result object with a business status).
    base_url : str or None
        Decoder base URL.  ``None`` selects the flavor's public endpoint.
    username : str or None
        Value sent in the username header.  Optional; some decoders are
        unauthenticated.
    password : str or None
        Value sent in the password header.
    username_header : str
        Header name carrying ``username``.
    password_header : str
        Header name carrying ``password``.  Some decoder deployments
        expect ``password``, others ``Password``.
    timeout : float
        Total budget for a single decoder request in seconds.
    db_path : str
        SQLite database file used by the persistent store.
    coalesce : bool
        Share one in-flight decode between concurrent resolutions of
        the same VIN.
    host : str
        Bind address for ``pyvin serve``.
    port : int
        Listen port for ``pyvin serve``.
    """

    decoder: str = DECODER_NHTSA
    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    username_header: str = "UserName"
    password_header: str = "password"
    timeout: float = DEFAULT_TIMEOUT
    db_path: str = "pyvin.sqlite3"
    coalesce: bool = True
    host: str = "0.0.0.0"
    port: int = 8080

    def __post_init__(self) -> None:
        if self.decoder not in DEFAULT_BASE_URLS:
            raise VinConfigError(f"Unknown decoder {self.decoder!r}; expected one of {sorted(DEFAULT_BASE_URLS)}")
        if self.timeout <= 0:
            raise VinConfigError(f"timeout must be positive, got {self.timeout}")
        if not self.username_header or not self.password_header:
            raise VinConfigError("Credential header names must not be empty")

    @property
    def decoder_base_url(self) -> str:
        """Base URL without a trailing slash."""
        return (self.base_url or DEFAULT_BASE_URLS[self.decoder]).rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    def credential_headers(self) -> dict[str, str]:
        """Headers carrying the decoder credentials (empty when unset)."""
        headers: dict[str, str] = {}
        if self.username:
            headers[self.username_header] = self.username
        if self.password:
            headers[self.password_header] = self.password
        return headers

    @classmethod
    def from_env(cls, **overrides: Any) -> VinConfig:
        """Create configuration from ``PYVIN_*`` environment variables.

        Explicit keyword arguments override environment values.  Missing
        credentials for a decoder that expects them are logged as a
        warning; they are not an error.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        VinConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PYVIN_DECODER": "decoder",
            "PYVIN_BASE_URL": "base_url",
            "PYVIN_USERNAME": "username",
            "PYVIN_PASSWORD": "password",
            "PYVIN_USERNAME_HEADER": "username_header",
            "PYVIN_PASSWORD_HEADER": "password_header",
            "PYVIN_DB_PATH": "db_path",
            "PYVIN_HOST": "host",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val.strip()

        # Numeric and boolean fields are handled separately
        timeout_env = env.get("PYVIN_TIMEOUT")
        if timeout_env and "timeout" not in overrides:
            try:
                config_kwargs["timeout"] = float(timeout_env)
            except ValueError as exc:
                raise VinConfigError(f"PYVIN_TIMEOUT is not a number: {timeout_env!r}") from exc

        port_env = env.get("PYVIN_PORT")
        if port_env and "port" not in overrides:
            try:
                config_kwargs["port"] = int(port_env)
            except ValueError as exc:
                raise VinConfigError(f"PYVIN_PORT is not an integer: {port_env!r}") from exc

        if "coalesce" not in overrides:
            config_kwargs["coalesce"] = _env_bool(env.get("PYVIN_COALESCE"), True)

        config_kwargs.update(overrides)
        config = cls(**config_kwargs)

        if config.decoder in _AUTHENTICATED_DECODERS and not config.has_credentials:
            _logger.warning(
                "PYVIN_USERNAME or PYVIN_PASSWORD not set; %s requests will be sent without credentials",
                config.decoder,
            )
        return config
