"""Data models for pyvin."""

from pyvin.models.outcome import DecodeOutcome, Resolution, ResolutionSource
from pyvin.models.record import CANONICAL_FIELDS, VehicleRecord

__all__ = [
    "CANONICAL_FIELDS",
    "DecodeOutcome",
    "Resolution",
    "ResolutionSource",
    "VehicleRecord",
]
