"""Example editable types for bindery demos."""

from dataclasses import dataclass, field
from enum import Enum

from bindery import DOC, TRANSIENT, DurableId, editable


class LightKind(Enum):
    POINT = "point"
    SPOT = "spot"
    AREA = "area"


@dataclass
class Color:
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0


@editable
@dataclass
class Light:
    intensity: float = field(default=1.0, metadata={DOC: "Brightness multiplier"})
    color: Color = field(default_factory=Color)
    kind: LightKind = LightKind.POINT
    enabled: bool = True
    flicker_phase: float = field(default=0.0, metadata={TRANSIENT: True})


@editable(tag="Follow")
@dataclass
class FollowTarget:
    """Points at another object by durable id, so it survives reloads."""

    target: DurableId | None = None
    distance: float = 5.0
