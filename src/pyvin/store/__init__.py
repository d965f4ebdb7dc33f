"""Store layer.

This package is the single place where decoded records are persisted and
where concurrent writes for the same VIN are reconciled.
"""

from pyvin.store.base import VehicleStore
from pyvin.store.memory import MemoryVehicleStore
from pyvin.store.sqlite import SqliteVehicleStore

__all__ = ["MemoryVehicleStore", "SqliteVehicleStore", "VehicleStore"]
