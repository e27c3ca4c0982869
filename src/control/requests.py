from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"

    @property
    def step(self) -> int:
        """Return +1 for up, -1 for down."""
        return 1 if self is Direction.UP else -1

    @property
    def opposite(self) -> "Direction":
        return Direction.DOWN if self is Direction.UP else Direction.UP

    @classmethod
    def toward(cls, origin: int, destination: int) -> "Direction":
        return cls.UP if destination >= origin else cls.DOWN


class ElevatorState(str, Enum):
    IDLE = "idle"
    MOVING = "moving"
    OUT_OF_SERVICE = "out_of_service"


@dataclass(frozen=True)
class FloorRequest:
    """A hall call: the floor it came from and the direction the caller wants."""

    floor: int
    direction: Direction
