"""Decoder and resolver result models."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyvin.exceptions import VinStoreError
from pyvin.models.record import VehicleRecord


class DecodeOutcome(BaseModel):
    """A successful decoder response, before normalization.

    Decoder failures are raised as :class:`~pyvin.exceptions.VinDecodeError`
    and never produce an outcome.
    """

    model_config = ConfigDict(frozen=True)

    vin: str
    raw: dict[str, Any] = Field(default_factory=dict)
    """The complete decoded response body, persisted verbatim."""
    entry: dict[str, Any] | None = None
    """The selected result entry that canonical fields are read from.

    ``None`` means ``raw`` is itself the entry; ``{}`` means the decoder
    returned no entries.
    """
    status: str | None = None
    """Business status, for decoders whose responses carry one."""
    result_count: int = 0
    """How many result entries the decoder returned."""


class ResolutionSource(enum.StrEnum):
    """Which path produced a resolved record."""

    STORE = "store"
    DECODER = "decoder"


class Resolution(BaseModel):
    """Result of :meth:`VinResolver.resolve`.

    ``warning`` carries a store failure that did not prevent the
    resolution (a failed cache read followed by a successful decode, or
    a failed cache write).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    record: VehicleRecord
    source: ResolutionSource
    warning: VinStoreError | None = None

    @property
    def cached(self) -> bool:
        """Whether the record was served from the store."""
        return self.source == ResolutionSource.STORE
