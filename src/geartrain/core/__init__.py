"""Core module: types, errors, configuration, logging."""

from .config import GeartrainConfig, LoggingConfig, NetworkConfig, load_config
from .errors import (
    DegenerateQueryError,
    GearConstructionError,
    GeartrainError,
    InvalidRelationError,
    LayoutError,
    RelationErrorKind,
    UnknownGearError,
)
from .types import ConnectResult, GearId, GearSpec, GearState, RelationKind, SyncReport

__all__ = [
    "GeartrainConfig",
    "NetworkConfig",
    "LoggingConfig",
    "load_config",
    "GeartrainError",
    "GearConstructionError",
    "InvalidRelationError",
    "RelationErrorKind",
    "DegenerateQueryError",
    "UnknownGearError",
    "LayoutError",
    "GearId",
    "GearSpec",
    "GearState",
    "RelationKind",
    "SyncReport",
    "ConnectResult",
]
