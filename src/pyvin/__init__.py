"""pyvin - Read-through VIN resolution backed by an external decoder."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvin")
except PackageNotFoundError:
    __version__ = "0+local"

from pyvin.client import VinDecoderClient
from pyvin.config import VinConfig
from pyvin.exceptions import (
    VinConfigError,
    VinDecodeError,
    VinError,
    VinInputError,
    VinNoMatchError,
    VinStoreError,
    VinTimeoutError,
    VinTransportError,
)
from pyvin.models import (
    CANONICAL_FIELDS,
    DecodeOutcome,
    Resolution,
    ResolutionSource,
    VehicleRecord,
)
from pyvin.normalize import normalize_record
from pyvin.resolver import VinResolver
from pyvin.store import MemoryVehicleStore, SqliteVehicleStore, VehicleStore

__all__ = [
    "__version__",
    "CANONICAL_FIELDS",
    "DecodeOutcome",
    "MemoryVehicleStore",
    "Resolution",
    "ResolutionSource",
    "SqliteVehicleStore",
    "VehicleRecord",
    "VehicleStore",
    "VinConfig",
    "VinConfigError",
    "VinDecodeError",
    "VinDecoderClient",
    "VinError",
    "VinInputError",
    "VinNoMatchError",
    "VinResolver",
    "VinStoreError",
    "VinTimeoutError",
    "VinTransportError",
    "normalize_record",
]
