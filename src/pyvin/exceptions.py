"""Custom exception hierarchy for pyvin."""

from __future__ import annotations


class VinError(Exception):
    """Base exception for all pyvin errors."""


class VinConfigError(VinError):
    """Invalid or missing configuration."""


class VinInputError(VinError, ValueError):
    """The VIN supplied by the caller is empty or malformed."""


class VinDecodeError(VinError):
    """The external decoder could not produce a result for a VIN.

    Raised for every kind of decoder failure; the subclasses narrow the
    cause.  Nothing is written to the store when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        vin: str = "",
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.vin = vin
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class VinTransportError(VinDecodeError):
    """HTTP-level failure (network, non-200, invalid JSON, unexpected shape)."""


class VinTimeoutError(VinTransportError):
    """The decoder did not answer within the configured timeout."""


class VinNoMatchError(VinDecodeError):
    """The decoder answered but rejected the VIN (e.g. ``NoRecordsFound``).

    Only raised by decoder flavors whose responses carry a business
    status field.
    """

    def __init__(
        self,
        message: str,
        *,
        vin: str = "",
        status: str = "",
        url: str = "",
    ) -> None:
        self.status = status
        super().__init__(message, vin=vin, url=url)


class VinStoreError(VinError):
    """Persistence read or write failure."""

    def __init__(
        self,
        message: str,
        *,
        vin: str = "",
        operation: str = "",
    ) -> None:
        self.vin = vin
        self.operation = operation
        super().__init__(message)
