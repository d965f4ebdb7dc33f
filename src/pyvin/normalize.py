"""Record normalization.

Maps a loosely-typed decoder payload onto :class:`VehicleRecord`.
Normalization never fails: unknown keys stay in ``raw`` and values that
cannot be read as text leave the canonical field empty.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pyvin.models.record import VehicleRecord

#: Source keys per canonical field, first present wins.  The first key is
#: the NHTSA vPIC name, the second (when any) the JD Power one.
FIELD_SOURCES: dict[str, tuple[str, ...]] = {
    "make": ("Make",),
    "model": ("Model",),
    "model_year": ("ModelYear", "Year"),
    "manufacturer": ("Manufacturer",),
    "plant_country": ("PlantCountry",),
    "plant_state": ("PlantState",),
    "body_class": ("BodyClass", "ModelType"),
    "engine_cylinders": ("EngineCylinders", "Cylinders"),
    "fuel_type": ("FuelTypePrimary", "FuelType"),
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def safe_str(value: Any) -> str | None:
    """Read a decoder scalar as text.

    ``None``, blank strings, NaN and non-scalars (dicts, lists) give ``None``.
    Whole floats are rendered without the trailing ``.0``.
    """
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
        return str(value)
    text = str(value).strip()
    return text if text else None


def pick_source(raw: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    """Return the first usable value among *keys*."""
    for key in keys:
        if key in raw:
            value = safe_str(raw[key])
            if value is not None:
                return value
    return None


def normalize_record(
    vin: str,
    raw: Any,
    *,
    entry: Any = None,
    decoded_at: datetime | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> VehicleRecord:
    """Build the canonical record for *vin* from a decoder payload.

    *raw* is kept verbatim as the record's ``raw``.  Canonical fields are
    read from *entry* when given (the selected result inside a wrapped
    response), otherwise from *raw* itself.

    The record is keyed by the requested *vin*, never by a VIN field
    inside the payload.  A non-mapping payload yields an all-empty record
    with an empty ``raw``.
    """
    payload: dict[str, Any] = dict(raw) if isinstance(raw, Mapping) else {}
    if entry is None:
        source: Mapping[str, Any] = payload
    else:
        source = entry if isinstance(entry, Mapping) else {}
    fields = {name: pick_source(source, keys) for name, keys in FIELD_SOURCES.items()}
    return VehicleRecord(
        vin=vin,
        raw=payload,
        updated_at=decoded_at or clock(),
        **fields,
    )
