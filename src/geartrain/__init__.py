"""Gear network constraint propagation.

Primary entry points:
- geartrain.gear.network    (GearNetwork: relations + synchronization)
- geartrain.gear.invariants (consistency checks)
- geartrain.gear.layout     (YAML layouts)
"""

from .core.errors import (
    DegenerateQueryError,
    GearConstructionError,
    GeartrainError,
    InvalidRelationError,
    UnknownGearError,
)
from .core.types import ConnectResult, GearId, GearState, SyncReport
from .gear.network import GearNetwork

__all__ = [
    "__version__",
    "GearNetwork",
    "GearId",
    "GearState",
    "SyncReport",
    "ConnectResult",
    "GeartrainError",
    "GearConstructionError",
    "InvalidRelationError",
    "DegenerateQueryError",
    "UnknownGearError",
]
__version__ = "0.1.0"
