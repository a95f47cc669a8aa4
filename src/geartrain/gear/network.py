"""Gear network: relation storage and state synchronization.

A network owns every gear and every relation between them. Two relation kinds
exist:

    MESH   tooth contact; tooth speed is conserved with reversed sign and
           torque scales with the tooth ratio, also reversed.
    AXIAL  rigid shared axis; frequency and torque are identical.

Any change to one gear (frequency, torque, or a new relation) is followed by a
synchronization traversal that rewrites every reachable gear so both rules
hold again. The traversal uses an explicit worklist and settles each gear at
most once, so it terminates on cyclic networks.
"""

from __future__ import annotations

import numbers
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..core.config import NetworkConfig
from ..core.errors import InvalidRelationError, RelationErrorKind, UnknownGearError
from ..core.logging import get_logger
from ..core.types import (
    ConnectResult,
    GearId,
    GearSpec,
    GearState,
    RelationKind,
    SyncReport,
)

logger = get_logger(__name__)


@dataclass
class _GearNode:
    spec: GearSpec
    frequency: float = 0.0
    torque: float = 0.0
    meshed: set[GearId] = field(default_factory=set)
    coaxial: set[GearId] = field(default_factory=set)

    @property
    def teeth(self) -> int:
        return self.spec.teeth


class GearNetwork:
    """Mutable network of meshed and co-axial gears.

    Example:
        net = GearNetwork()
        a, b = net.add_gear(30), net.add_gear(60)
        net.connect_mesh(a, b)
        net.set_frequency(a, 1.0)
        net.state(b).frequency  # -0.5
    """

    def __init__(self, config: NetworkConfig | None = None) -> None:
        self.config = config or NetworkConfig()
        self._nodes: list[_GearNode] = []

    # ------------------------------------------------------------------
    # Construction and lookup
    # ------------------------------------------------------------------

    def add_gear(self, teeth: int, radius: float | None = None) -> GearId:
        """Create a standalone gear at rest.

        Args:
            teeth: Number of teeth (positive integer).
            radius: Gear radius (positive). Defaults to ``teeth``.

        Returns:
            Handle of the new gear.

        Raises:
            GearConstructionError: If ``teeth`` or ``radius`` is not positive.
        """
        spec = GearSpec(teeth, radius)
        gid = GearId(len(self._nodes))
        self._nodes.append(_GearNode(spec=spec))
        logger.debug("gear added", gear=gid, teeth=spec.teeth, radius=spec.radius)
        return gid

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, gear: object) -> bool:
        if isinstance(gear, bool) or not isinstance(gear, numbers.Integral):
            return False
        return 0 <= gear < len(self._nodes)

    def __iter__(self) -> Iterator[GearId]:
        return (GearId(i) for i in range(len(self._nodes)))

    def _handle(self, gear: GearId) -> GearId:
        if gear not in self:
            raise UnknownGearError(gear)
        return GearId(int(gear))

    def _node(self, gear: GearId) -> _GearNode:
        return self._nodes[self._handle(gear)]

    def state(self, gear: GearId) -> GearState:
        """Return a read-only snapshot of ``gear``."""
        gear = self._handle(gear)
        node = self._nodes[gear]
        return GearState(
            id=gear,
            teeth=node.spec.teeth,
            radius=node.spec.radius,
            frequency=node.frequency,
            torque=node.torque,
            meshed=frozenset(node.meshed),
            coaxial=frozenset(node.coaxial),
        )

    def states(self) -> list[GearState]:
        return [self.state(g) for g in self]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_meshed(self, a: GearId, b: GearId) -> bool:
        """Whether ``a`` and ``b`` are in direct tooth contact."""
        return self._handle(b) in self._node(a).meshed

    def shares_axis(self, a: GearId, b: GearId) -> bool:
        """Whether ``a`` and ``b`` are directly joined on one axis.

        Only direct relations count: a gear two axial hops away shares the
        same state but is not reported here. See ``axial_group``.
        """
        return self._handle(b) in self._node(a).coaxial

    def axial_group(self, gear: GearId) -> frozenset[GearId]:
        """All gears transitively sharing an axis with ``gear`` (itself included)."""
        gear = self._handle(gear)
        seen = {gear}
        stack = [gear]
        while stack:
            for other in self._nodes[stack.pop()].coaxial:
                if other not in seen:
                    seen.add(other)
                    stack.append(other)
        return frozenset(seen)

    def mesh_pairs(self) -> list[tuple[GearId, GearId]]:
        """Every meshed pair once, as ``(lower, higher)`` handles."""
        return [
            (GearId(i), other)
            for i, node in enumerate(self._nodes)
            for other in sorted(node.meshed)
            if i < other
        ]

    def axial_pairs(self) -> list[tuple[GearId, GearId]]:
        """Every direct axial pair once, as ``(lower, higher)`` handles."""
        return [
            (GearId(i), other)
            for i, node in enumerate(self._nodes)
            for other in sorted(node.coaxial)
            if i < other
        ]

    def tooth_speed(self, gear: GearId) -> float:
        return self.state(gear).tooth_speed

    def period(self, gear: GearId) -> float:
        return self.state(gear).period

    def edge_force(self, gear: GearId) -> float:
        return self.state(gear).edge_force

    def force_at_radius(self, gear: GearId, r: float) -> float:
        return self.state(gear).force_at_radius(r)

    # ------------------------------------------------------------------
    # State mutation
    # ------------------------------------------------------------------

    def set_frequency(self, gear: GearId, f: float) -> SyncReport:
        """Spin ``gear`` at frequency ``f`` and propagate to connected gears.

        The gear's torque is left as it is and propagated along with the new
        frequency.
        """
        gear = self._handle(gear)
        node = self._nodes[gear]
        node.frequency = float(f)
        return self._synchronize(gear)

    def apply_torque(self, gear: GearId, t: float) -> SyncReport:
        """Apply torque ``t`` on ``gear`` and propagate to connected gears."""
        gear = self._handle(gear)
        node = self._nodes[gear]
        node.torque = float(t)
        return self._synchronize(gear)

    def set_tooth_speed(self, gear: GearId, v: float) -> SyncReport:
        return self.set_frequency(gear, v / self._node(gear).teeth)

    def apply_edge_force(self, gear: GearId, f: float) -> SyncReport:
        """Apply a tangential force at the gear's own radius."""
        return self.apply_torque(gear, f * self._node(gear).spec.radius)

    def apply_force_at_radius(self, gear: GearId, f: float, r: float) -> SyncReport:
        """Apply a tangential force ``f`` at radial distance ``r``."""
        self._node(gear)
        return self.apply_torque(gear, f * r)

    # ------------------------------------------------------------------
    # Relation mutation
    # ------------------------------------------------------------------

    def connect_mesh(
        self,
        a: GearId,
        b: GearId,
        driver: GearId | None = None,
    ) -> ConnectResult:
        """Put ``a`` and ``b`` in tooth contact.

        The gear with the larger current torque drives the synchronization
        that follows, so its state overwrites the other side. On equal torque
        ``a`` drives. Passing ``driver`` (``a`` or ``b``) skips the torque
        comparison.

        Refused, leaving the network unchanged, when ``a`` and ``b`` share an
        axis or are the same gear.

        Returns:
            ConnectResult with the error on refusal, or the sync report.
        """
        a, b = self._handle(a), self._handle(b)
        node_a, node_b = self._nodes[a], self._nodes[b]
        if driver is not None:
            driver = self._handle(driver)
            if driver not in (a, b):
                raise ValueError(f"driver must be one of the connected gears ({a}, {b}), got {driver}")

        error = None
        if a == b:
            error = InvalidRelationError(RelationErrorKind.SELF_RELATION, a, b)
        elif b in node_a.coaxial:
            error = InvalidRelationError(RelationErrorKind.SHARES_AXIS, a, b)
        if error is not None:
            return self._reject(RelationKind.MESH, a, b, error)

        if driver is None:
            driver = b if node_b.torque > node_a.torque else a

        node_a.meshed.add(b)
        node_b.meshed.add(a)
        logger.debug("gears meshed", a=a, b=b, driver=driver)
        return ConnectResult(RelationKind.MESH, a, b, sync=self._synchronize(driver))

    def connect_axial(self, a: GearId, b: GearId) -> ConnectResult:
        """Mount ``b`` on the axis of ``a``.

        ``b``, and everything reachable from it, takes ``a``'s frequency and
        torque. Refused, leaving the network unchanged, when the two gears are
        directly meshed or are the same gear.
        """
        a, b = self._handle(a), self._handle(b)
        node_a, node_b = self._nodes[a], self._nodes[b]

        error = None
        if a == b:
            error = InvalidRelationError(RelationErrorKind.SELF_RELATION, a, b)
        elif b in node_a.meshed:
            error = InvalidRelationError(RelationErrorKind.ALREADY_MESHED, a, b)
        if error is not None:
            return self._reject(RelationKind.AXIAL, a, b, error)

        node_a.coaxial.add(b)
        node_b.coaxial.add(a)
        logger.debug("gears share axis", a=a, b=b)
        return ConnectResult(RelationKind.AXIAL, a, b, sync=self._synchronize(a))

    def create_axis(self, gears: Iterable[GearId]) -> list[ConnectResult]:
        """Join an ordered collection of gears onto one axis.

        Consecutive pairs are connected with ``connect_axial``, so the first
        gear's state is carried down the whole axis. A refused pair is
        left unjoined and the remaining pairs are still attempted.
        """
        results: list[ConnectResult] = []
        prev: GearId | None = None
        for gear in gears:
            if prev is not None:
                results.append(self.connect_axial(prev, gear))
            prev = gear
        return results

    def _reject(
        self,
        kind: RelationKind,
        a: GearId,
        b: GearId,
        error: InvalidRelationError,
    ) -> ConnectResult:
        logger.warn("connection refused", relation=kind.value, a=a, b=b, reason=error.kind.value)
        return ConnectResult(kind, a, b, error=error)

    # ------------------------------------------------------------------
    # Synchronization
    # ------------------------------------------------------------------

    def _synchronize(self, origin: GearId) -> SyncReport:
        """Propagate ``origin``'s state through the network.

        Breadth-first over both relation kinds. A gear is settled the first
        time it is reached and never rewritten afterwards in the same pass.
        An axial neighbour already holding the propagated state is settled
        without being expanded.
        """
        nodes = self._nodes
        settled = {origin}
        order = [origin]
        queue = deque([origin])
        n_changed = 0
        n_edges = 0

        while queue:
            cur_id = queue.popleft()
            cur = nodes[cur_id]

            for m_id in cur.meshed:
                n_edges += 1
                if m_id in settled:
                    continue
                m = nodes[m_id]
                frequency = -(cur.frequency * cur.teeth) / m.teeth
                torque = -(m.teeth * cur.torque) / cur.teeth
                if m.frequency != frequency or m.torque != torque:
                    n_changed += 1
                m.frequency = frequency
                m.torque = torque
                settled.add(m_id)
                order.append(m_id)
                queue.append(m_id)

            for x_id in cur.coaxial:
                n_edges += 1
                if x_id in settled:
                    continue
                x = nodes[x_id]
                settled.add(x_id)
                order.append(x_id)
                if x.frequency == cur.frequency and x.torque == cur.torque:
                    continue
                x.frequency = cur.frequency
                x.torque = cur.torque
                n_changed += 1
                queue.append(x_id)

        report = SyncReport(
            origin=origin,
            visited=tuple(order),
            n_changed=n_changed,
            n_edges=n_edges,
        )
        logger.debug(
            "synchronized",
            origin=origin,
            visited=len(order),
            changed=n_changed,
            edges=n_edges,
        )
        if self.config.verify_after_mutation:
            self._verify(origin)
        return report

    def _verify(self, origin: GearId) -> None:
        from .invariants import check_invariants

        report = check_invariants(self, rtol=self.config.check_rtol, atol=self.config.check_atol)
        if not report.is_consistent:
            logger.warn(
                "network inconsistent after synchronization",
                origin=origin,
                violations=len(report.violations),
                max_residual=report.max_residual,
            )
