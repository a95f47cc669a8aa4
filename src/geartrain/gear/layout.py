"""Declarative gear layouts loaded from YAML.

Example layout::

    gears:
      - {name: motor, teeth: 80, radius: 0.03}
      - {name: idler, teeth: 18}
      - {name: out, teeth: 60}
    mesh:
      - [motor, idler]
    axes:
      - [idler, out]
    drives:
      - {gear: out, tooth_speed: 0.5}
      - {gear: motor, edge_force: 16.709}

Connections are applied in file order (all mesh pairs, then all axes), then
the drives in order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from ..core.config import NetworkConfig
from ..core.errors import LayoutError
from ..core.logging import get_logger
from ..core.types import ConnectResult, GearId
from .network import GearNetwork

logger = get_logger(__name__)

_DRIVE_FIELDS = ("frequency", "tooth_speed", "torque", "edge_force", "force")


class GearEntry(BaseModel):
    """One named gear."""

    name: str
    teeth: int
    radius: float | None = None


class MeshEntry(BaseModel):
    """Mesh pair with an optional explicit driver."""

    a: str
    b: str
    driver: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"mesh pair must name exactly two gears, got {data!r}")
            return {"a": data[0], "b": data[1]}
        return data

    @model_validator(mode="after")
    def _driver_is_member(self) -> MeshEntry:
        if self.driver is not None and self.driver not in (self.a, self.b):
            raise ValueError(f"driver {self.driver!r} is not one of {self.a!r}, {self.b!r}")
        return self


class DriveEntry(BaseModel):
    """One state change applied after the layout is connected."""

    gear: str
    frequency: float | None = None
    tooth_speed: float | None = None
    torque: float | None = None
    edge_force: float | None = None
    force: float | None = None
    at_radius: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _exactly_one(self) -> DriveEntry:
        given = [k for k in _DRIVE_FIELDS if getattr(self, k) is not None]
        if len(given) != 1:
            raise ValueError(f"drive for {self.gear!r} must set exactly one of {_DRIVE_FIELDS}, got {given}")
        if (self.force is None) != (self.at_radius is None):
            raise ValueError("'force' and 'at_radius' must be given together")
        return self


class GearLayout(BaseModel):
    """A complete network description."""

    gears: list[GearEntry] = Field(default_factory=list)
    mesh: list[MeshEntry] = Field(default_factory=list)
    axes: list[list[str]] = Field(default_factory=list)
    drives: list[DriveEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> GearLayout:
        names = [g.name for g in self.gears]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"duplicate gear names: {dupes}")
        return self


def load_layout(path: str | Path) -> GearLayout:
    """Load a layout from a YAML file.

    Args:
        path: Path to YAML layout.

    Returns:
        Validated GearLayout.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Layout file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return GearLayout.model_validate(data or {})


def save_layout(layout: GearLayout, path: str | Path) -> None:
    """Save a layout to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = layout.model_dump(exclude_none=True)
    data["mesh"] = [
        [m["a"], m["b"]] if "driver" not in m else m
        for m in data["mesh"]
    ]
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def build_network(
    layout: GearLayout,
    config: NetworkConfig | None = None,
) -> tuple[GearNetwork, dict[str, GearId], list[ConnectResult]]:
    """Build a network from a layout.

    Args:
        layout: Validated layout.
        config: Network configuration.

    Returns:
        (network, gear handles by name, results of every connection attempt).
        Refused connections are reported in the results, not raised.

    Raises:
        LayoutError: If a connection or drive names an undeclared gear.
        GearConstructionError: If a gear entry has invalid geometry.
    """
    network = GearNetwork(config)
    names: dict[str, GearId] = {}
    for entry in layout.gears:
        names[entry.name] = network.add_gear(entry.teeth, entry.radius)

    def lookup(name: str) -> GearId:
        try:
            return names[name]
        except KeyError:
            raise LayoutError(f"Layout refers to undeclared gear {name!r}") from None

    results: list[ConnectResult] = []
    for m in layout.mesh:
        driver = lookup(m.driver) if m.driver is not None else None
        results.append(network.connect_mesh(lookup(m.a), lookup(m.b), driver=driver))
    for axis in layout.axes:
        results.extend(network.create_axis([lookup(n) for n in axis]))

    for d in layout.drives:
        gear = lookup(d.gear)
        if d.frequency is not None:
            network.set_frequency(gear, d.frequency)
        elif d.tooth_speed is not None:
            network.set_tooth_speed(gear, d.tooth_speed)
        elif d.torque is not None:
            network.apply_torque(gear, d.torque)
        elif d.edge_force is not None:
            network.apply_edge_force(gear, d.edge_force)
        else:
            network.apply_force_at_radius(gear, d.force, d.at_radius)

    rejected = sum(1 for r in results if not r.ok)
    logger.info("layout built", gears=len(names), connections=len(results), rejected=rejected)
    return network, names, results


def snapshot(network: GearNetwork, names: dict[str, GearId]) -> dict[str, dict[str, Any]]:
    """JSON-ready state of every named gear, keyed by name."""
    return {name: network.state(gid).to_dict() for name, gid in names.items()}
