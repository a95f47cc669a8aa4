"""Core types shared by the gear network and its callers.

Gears are addressed by integer handles issued by a ``GearNetwork``. Callers
only ever see immutable ``GearState`` snapshots; the mutable nodes stay inside
the network.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NewType

from .errors import DegenerateQueryError, GearConstructionError, InvalidRelationError

GearId = NewType("GearId", int)


def finite_or_none(value: float) -> float | None:
    """Map NaN and infinities to None so the value serializes as JSON."""
    return value if math.isfinite(value) else None


class RelationKind(str, Enum):
    MESH = "mesh"
    AXIAL = "axial"


@dataclass(frozen=True)
class GearSpec:
    """Geometric constants of a gear.

    Attributes:
        teeth: Number of teeth per revolution (positive integer).
        radius: Gear radius. Defaults to ``teeth`` when omitted.
    """

    teeth: int
    radius: float | None = None

    def __post_init__(self) -> None:
        teeth = self.teeth
        if isinstance(teeth, bool) or not isinstance(teeth, numbers.Integral):
            raise GearConstructionError(
                f"Teeth number must be a positive whole number, got {teeth!r}"
            )
        if teeth <= 0:
            raise GearConstructionError(
                f"Teeth number must be a positive whole number (n>0), got {teeth}"
            )
        radius = float(teeth) if self.radius is None else self.radius
        if isinstance(radius, bool) or not isinstance(radius, numbers.Real) or not radius > 0:
            raise GearConstructionError(f"Radius must be a positive number, got {radius!r}")
        object.__setattr__(self, "teeth", int(teeth))
        object.__setattr__(self, "radius", float(radius))


@dataclass(frozen=True)
class GearState:
    """Read-only snapshot of one gear.

    Attributes:
        id: Handle of the gear in its network.
        teeth: Number of teeth.
        radius: Gear radius.
        frequency: Rotation frequency (sign gives direction).
        torque: Torque on the gear's axis.
        meshed: Handles of gears directly in tooth contact with this one.
        coaxial: Handles of gears directly sharing this gear's axis.
    """

    id: GearId
    teeth: int
    radius: float
    frequency: float = 0.0
    torque: float = 0.0
    meshed: frozenset[GearId] = field(default_factory=frozenset)
    coaxial: frozenset[GearId] = field(default_factory=frozenset)

    @property
    def tooth_speed(self) -> float:
        """Teeth passing a contact point per unit time."""
        return self.frequency * self.teeth

    @property
    def period(self) -> float:
        """Time for one revolution.

        Raises:
            DegenerateQueryError: If the gear is not turning.
        """
        if self.frequency == 0:
            raise DegenerateQueryError(f"Gear {self.id} has zero frequency; period is undefined")
        return 1.0 / self.frequency

    @property
    def edge_force(self) -> float:
        """Tangential force at the gear's own radius."""
        return self.force_at_radius(self.radius)

    def force_at_radius(self, r: float) -> float:
        """Tangential force at radial distance ``r`` from the axis.

        Raises:
            DegenerateQueryError: If ``r`` is not positive.
        """
        if not r > 0:
            raise DegenerateQueryError(f"Radial distance must be positive, got {r!r}")
        return self.torque / r

    def describe(self) -> str:
        return f"Teeth={self.teeth}, Frequency={self.frequency}, Torque={self.torque}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "id": int(self.id),
            "teeth": self.teeth,
            "radius": self.radius,
            "frequency": finite_or_none(self.frequency),
            "torque": finite_or_none(self.torque),
            "tooth_speed": finite_or_none(self.tooth_speed),
            "period": finite_or_none(self.period) if self.frequency != 0 else None,
            "meshed": sorted(int(g) for g in self.meshed),
            "coaxial": sorted(int(g) for g in self.coaxial),
        }


@dataclass(frozen=True)
class SyncReport:
    """Outcome of one synchronization traversal.

    Attributes:
        origin: Gear the traversal started from.
        visited: Gears settled by the traversal, in visiting order (origin first).
        n_changed: Gears whose frequency or torque was rewritten.
        n_edges: Relation edges examined.
    """

    origin: GearId
    visited: tuple[GearId, ...]
    n_changed: int
    n_edges: int


@dataclass(frozen=True)
class ConnectResult:
    """Outcome of a connect operation.

    Attributes:
        kind: Relation that was requested.
        a: First gear passed to the call.
        b: Second gear passed to the call.
        error: Why the connection was refused, or None if it was installed.
        sync: Synchronization that followed the connection (None when refused).
    """

    kind: RelationKind
    a: GearId
    b: GearId
    error: InvalidRelationError | None = None
    sync: SyncReport | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def origin(self) -> GearId | None:
        """Gear whose state won the connection."""
        return self.sync.origin if self.sync is not None else None

    def raise_for_error(self) -> None:
        """Raise the carried ``InvalidRelationError``, if any."""
        if self.error is not None:
            raise self.error
