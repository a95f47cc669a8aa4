"""Tests for YAML gear layouts."""

import pytest
from pydantic import ValidationError

from geartrain.core.errors import GearConstructionError, LayoutError
from geartrain.gear.layout import (
    DriveEntry,
    GearLayout,
    build_network,
    load_layout,
    save_layout,
    snapshot,
)

LAYOUT_YAML = """
gears:
  - {name: a, teeth: 30}
  - {name: b, teeth: 60}
  - {name: c, teeth: 6}
  - {name: d, teeth: 600, radius: 12.5}
mesh:
  - [a, b]
  - {a: d, b: c, driver: d}
axes:
  - [b, c]
drives:
  - {gear: d, frequency: 1.0}
  - {gear: d, torque: 1000.0}
"""


@pytest.fixture
def layout_file(tmp_path):
    path = tmp_path / "train.yml"
    path.write_text(LAYOUT_YAML)
    return path


def test_load_and_build(layout_file):
    """A YAML layout builds the drivetrain with its drives applied."""
    layout = load_layout(layout_file)
    network, names, results = build_network(layout)

    assert [r.ok for r in results] == [True, True, True]
    state = snapshot(network, names)
    assert state["a"]["frequency"] == 200.0
    assert state["a"]["torque"] == 5.0
    assert state["c"]["torque"] == -10.0
    assert state["d"]["radius"] == 12.5
    assert state["b"]["period"] == pytest.approx(-0.01)


def test_save_roundtrip(layout_file, tmp_path):
    """A saved layout loads back unchanged."""
    layout = load_layout(layout_file)
    out = tmp_path / "copy" / "train.yml"

    save_layout(layout, out)

    assert load_layout(out) == layout


def test_refused_connection_is_reported(tmp_path):
    """A refused connection is in the results, and the earlier relation stays."""
    layout = GearLayout.model_validate(
        {
            "gears": [{"name": "x", "teeth": 10}, {"name": "y", "teeth": 20}],
            "axes": [["x", "y"]],
            "mesh": [["x", "y"]],
        }
    )

    network, names, results = build_network(layout)

    # mesh pairs are applied before axes
    assert [r.ok for r in results] == [True, False]
    assert network.is_meshed(names["x"], names["y"])


def test_undeclared_gear():
    """Connections naming an unknown gear fail with the gear's name."""
    layout = GearLayout.model_validate({"gears": [{"name": "x", "teeth": 10}], "mesh": [["x", "ghost"]]})

    with pytest.raises(LayoutError, match="ghost"):
        build_network(layout)


def test_invalid_geometry_in_layout():
    """Invalid teeth in a layout fail when the gear is built."""
    layout = GearLayout.model_validate({"gears": [{"name": "x", "teeth": -3}]})

    with pytest.raises(GearConstructionError):
        build_network(layout)


@pytest.mark.parametrize(
    "drive",
    [
        {"gear": "x"},
        {"gear": "x", "frequency": 1.0, "torque": 2.0},
        {"gear": "x", "force": 2.0},
        {"gear": "x", "force": 2.0, "at_radius": 0.0},
    ],
)
def test_invalid_drives(drive):
    """A drive must set exactly one quantity, with force and radius paired."""
    with pytest.raises(ValidationError):
        DriveEntry.model_validate(drive)


def test_force_drive():
    """Force and tooth-speed drives are applied in order."""
    layout = GearLayout.model_validate(
        {
            "gears": [{"name": "x", "teeth": 10, "radius": 2.0}],
            "drives": [{"gear": "x", "force": 3.0, "at_radius": 4.0}, {"gear": "x", "tooth_speed": 5.0}],
        }
    )

    network, names, _ = build_network(layout)

    assert network.state(names["x"]).torque == 12.0
    assert network.state(names["x"]).frequency == 0.5


def test_layout_validation():
    """Duplicate names, bad pairs and foreign drivers fail validation."""
    with pytest.raises(ValidationError):
        GearLayout.model_validate({"gears": [{"name": "x", "teeth": 10}, {"name": "x", "teeth": 12}]})
    with pytest.raises(ValidationError):
        GearLayout.model_validate({"mesh": [["x", "y", "z"]]})
    with pytest.raises(ValidationError):
        GearLayout.model_validate({"mesh": [{"a": "x", "b": "y", "driver": "z"}]})
