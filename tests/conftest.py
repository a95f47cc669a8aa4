"""Pytest configuration for geartrain.

Shared networks for the tests. The drivetrain fixture is the A-B-C train used
throughout the scenario tests: A(30) meshed to B(60), C(6) on B's axis, with a
torque of 30 applied at A.
"""

from __future__ import annotations

import pytest

from geartrain.core.logging import set_log_level
from geartrain.gear.network import GearNetwork


@pytest.fixture(autouse=True)
def _reset_log_level():
    set_log_level("WARN")
    yield
    set_log_level("WARN")


@pytest.fixture
def network() -> GearNetwork:
    return GearNetwork()


@pytest.fixture
def drivetrain(network: GearNetwork):
    a = network.add_gear(30)
    b = network.add_gear(60)
    network.connect_mesh(a, b)
    network.set_frequency(a, 1.0)
    network.apply_torque(a, 30.0)
    c = network.add_gear(6)
    network.connect_axial(b, c)
    return network, {"a": a, "b": b, "c": c}
