"""Base model for pyvin records.

Every canonical model inherits from :class:`VinBaseModel` which
provides:

* a frozen, ``extra="ignore"`` configuration;
* a ``model_validator(mode="before")`` that drops decoder "no value"
  sentinels (``None``, blank strings, NaN) so the field default is used;
* a ``raw`` dict that keeps the original decoder payload verbatim.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce an ISO-8601 string or datetime to an aware UTC datetime.

    Naive values are assumed to be UTC.  Returns ``None`` for ``None``.
    """
    if value is None:
        return value
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    raise ValueError(f"not a timestamp: {value!r}")


UtcTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and naive datetimes to UTC."""


class VinBaseModel(BaseModel):
    """Base for canonical pyvin models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original decoder payload."""

    @model_validator(mode="before")
    @classmethod
    def _drop_sentinels(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if key == "raw":
                cleaned[key] = value
                continue
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned
