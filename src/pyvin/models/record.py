"""Canonical vehicle record."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pyvin.models._base import UtcTimestamp, VinBaseModel

#: Canonical fields promoted out of the decoder payload, in column order.
CANONICAL_FIELDS: tuple[str, ...] = (
    "make",
    "model",
    "model_year",
    "manufacturer",
    "plant_country",
    "plant_state",
    "body_class",
    "engine_cylinders",
    "fuel_type",
)


class VehicleRecord(VinBaseModel):
    """A decoded vehicle, keyed by the VIN it was requested with.

    Every canonical field is optional: ``None`` means the decoder did
    not supply it.  ``raw`` keeps every field the decoder returned,
    including the ones not promoted to the canonical schema.
    """

    vin: str
    """Vehicle Identification Number (opaque, case-sensitive)."""
    make: str | None = None
    """Brand (e.g. ``"HONDA"``)."""
    model: str | None = None
    """Model name (e.g. ``"Civic"``)."""
    model_year: str | None = None
    """Model year as reported by the decoder (e.g. ``"2020"``)."""
    manufacturer: str | None = None
    """Manufacturer legal name."""
    plant_country: str | None = None
    plant_state: str | None = None
    body_class: str | None = None
    """Body style or, for powersports decoders, the model type."""
    engine_cylinders: str | None = None
    fuel_type: str | None = None
    """Primary fuel type."""
    updated_at: UtcTimestamp = None
    """When the decode that produced this record happened (UTC)."""

    @field_validator("vin", mode="before")
    @classmethod
    def _require_vin(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("vin must be a non-empty string")
        return value

    @field_validator(*CANONICAL_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @property
    def is_empty(self) -> bool:
        """Whether the decoder supplied none of the canonical fields."""
        return all(getattr(self, name) is None for name in CANONICAL_FIELDS)

    def canonical(self) -> dict[str, str | None]:
        """The canonical fields as a plain dict."""
        return {name: getattr(self, name) for name in CANONICAL_FIELDS}
