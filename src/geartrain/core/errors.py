"""Exception hierarchy for gear networks.

Construction and lookup failures are raised. Rejected relations are returned to
the caller inside a ``ConnectResult`` instead, so a refused connection never
interrupts a longer build sequence.
"""

from __future__ import annotations

from enum import Enum


class GeartrainError(Exception):
    """Base class for all geartrain errors."""


class GearConstructionError(GeartrainError, ValueError):
    """Raised when a gear is created with a non-positive tooth count or radius."""


class DegenerateQueryError(GeartrainError, ValueError):
    """Raised by a query whose formula is undefined for the current state."""


class UnknownGearError(GeartrainError, KeyError):
    """Raised when a handle was not issued by the network it is used with."""


class LayoutError(GeartrainError, ValueError):
    """Raised when a layout refers to a gear name it never declared."""


class RelationErrorKind(str, Enum):
    SELF_RELATION = "self_relation"
    SHARES_AXIS = "shares_axis"
    ALREADY_MESHED = "already_meshed"


class InvalidRelationError(GeartrainError, ValueError):
    """A mesh or axial connection that would break relation exclusivity.

    Attributes:
        kind: Why the connection was refused.
        a: First gear handle of the attempted connection.
        b: Second gear handle of the attempted connection.
    """

    _MESSAGES = {
        RelationErrorKind.SELF_RELATION: "gear {a} cannot be related to itself",
        RelationErrorKind.SHARES_AXIS: "gears {a} and {b} share an axis and cannot mesh",
        RelationErrorKind.ALREADY_MESHED: "gears {a} and {b} are meshed and cannot share an axis",
    }

    def __init__(self, kind: RelationErrorKind, a: int, b: int) -> None:
        self.kind = kind
        self.a = a
        self.b = b
        super().__init__(self._MESSAGES[kind].format(a=a, b=b))
