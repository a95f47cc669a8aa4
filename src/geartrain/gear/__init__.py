"""Gear module: network, invariant checks, layouts."""

from .invariants import InvariantRecord, InvariantReport, check_invariants
from .layout import GearLayout, build_network, load_layout, save_layout, snapshot
from .network import GearNetwork

__all__ = [
    "GearNetwork",
    "check_invariants",
    "InvariantRecord",
    "InvariantReport",
    "GearLayout",
    "load_layout",
    "save_layout",
    "build_network",
    "snapshot",
]
