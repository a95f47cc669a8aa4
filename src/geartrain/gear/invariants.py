"""Consistency checks over a gear network.

Each relation contributes residuals that are zero when the network is
consistent:

    mesh_tooth_speed   f1*n1 + f2*n2
    mesh_torque        t2*n1 + t1*n2
    axial_frequency    f - f_ref   (per gear, against the first gear of its axis)
    axial_torque       t - t_ref

A record is feasible when its residual is within ``atol + rtol * scale``,
matching ``np.isclose``. ``slack`` follows the G <= 0 feasible convention.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from ..core.types import finite_or_none

if TYPE_CHECKING:
    from ..core.types import GearId
    from .network import GearNetwork

MESH_TOOTH_SPEED = "mesh_tooth_speed"
MESH_TORQUE = "mesh_torque"
AXIAL_FREQUENCY = "axial_frequency"
AXIAL_TORQUE = "axial_torque"


@dataclass
class InvariantRecord:
    name: str
    gears: tuple[GearId, GearId]
    residual: float
    tolerance: float

    @property
    def slack(self) -> float:
        return abs(self.residual) - self.tolerance

    @property
    def feasible(self) -> bool:
        return self.slack <= 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "gears": [int(g) for g in self.gears],
            "residual": finite_or_none(float(self.residual)),
            "tolerance": finite_or_none(float(self.tolerance)),
            "feasible": self.feasible,
        }


@dataclass
class InvariantReport:
    """All invariant records of one network check."""

    records: list[InvariantRecord] = field(default_factory=list)

    @property
    def violations(self) -> list[InvariantRecord]:
        return [r for r in self.records if not r.feasible]

    @property
    def is_consistent(self) -> bool:
        """Check if every relation holds within tolerance."""
        return not self.violations

    @property
    def max_residual(self) -> float:
        """Largest absolute residual (0 for a network without relations)."""
        if not self.records:
            return 0.0
        return float(np.max(np.abs([r.residual for r in self.records])))

    def to_dicts(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self.records]


def _records(
    name: str,
    pairs: list[tuple[GearId, GearId]],
    lhs: np.ndarray,
    rhs: np.ndarray,
    rtol: float,
    atol: float,
) -> list[InvariantRecord]:
    # lhs == -rhs for mesh, lhs == rhs for axial; callers pass the signed rhs
    residual = lhs - rhs
    tolerance = atol + rtol * np.abs(rhs)
    return [
        InvariantRecord(name=name, gears=pair, residual=float(r), tolerance=float(tol))
        for pair, r, tol in zip(pairs, residual, tolerance)
    ]


def check_mesh(network: GearNetwork, rtol: float = 1e-9, atol: float = 1e-12) -> list[InvariantRecord]:
    """Check tooth-speed and torque conservation over every meshed pair."""
    pairs = network.mesh_pairs()
    if not pairs:
        return []

    states = [(network.state(a), network.state(b)) for a, b in pairs]
    n1 = np.array([s1.teeth for s1, _ in states], dtype=np.float64)
    n2 = np.array([s2.teeth for _, s2 in states], dtype=np.float64)
    f1 = np.array([s1.frequency for s1, _ in states], dtype=np.float64)
    f2 = np.array([s2.frequency for _, s2 in states], dtype=np.float64)
    t1 = np.array([s1.torque for s1, _ in states], dtype=np.float64)
    t2 = np.array([s2.torque for _, s2 in states], dtype=np.float64)

    records = _records(MESH_TOOTH_SPEED, pairs, f1 * n1, -(f2 * n2), rtol, atol)
    records += _records(MESH_TORQUE, pairs, t2 * n1, -(t1 * n2), rtol, atol)
    return records


def check_axial(network: GearNetwork, rtol: float = 1e-9, atol: float = 1e-12) -> list[InvariantRecord]:
    """Check that every axial group shares one frequency and torque.

    Groups are transitive: gears linked through a chain of axial relations are
    compared against the lowest-numbered gear of the chain.
    """
    seen: set[GearId] = set()
    pairs: list[tuple[GearId, GearId]] = []
    for gear in network:
        if gear in seen:
            continue
        group = sorted(network.axial_group(gear))
        seen.update(group)
        ref = group[0]
        pairs.extend((ref, other) for other in group[1:])
    if not pairs:
        return []

    f_ref = np.array([network.state(a).frequency for a, _ in pairs], dtype=np.float64)
    f = np.array([network.state(b).frequency for _, b in pairs], dtype=np.float64)
    t_ref = np.array([network.state(a).torque for a, _ in pairs], dtype=np.float64)
    t = np.array([network.state(b).torque for _, b in pairs], dtype=np.float64)

    records = _records(AXIAL_FREQUENCY, pairs, f, f_ref, rtol, atol)
    records += _records(AXIAL_TORQUE, pairs, t, t_ref, rtol, atol)
    return records


def check_invariants(
    network: GearNetwork,
    rtol: float = 1e-9,
    atol: float = 1e-12,
) -> InvariantReport:
    """Check every mesh and axial relation of ``network``.

    Args:
        network: Network to inspect. Not modified.
        rtol: Relative tolerance, scaled by the magnitude of the expected value.
        atol: Absolute tolerance.

    Returns:
        InvariantReport with one record per relation and quantity.
    """
    records = check_mesh(network, rtol, atol) + check_axial(network, rtol, atol)
    return InvariantReport(records=records)
