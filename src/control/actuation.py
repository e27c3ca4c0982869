"""Door and timer collaborators called by elevators around each stop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class Doors(Protocol):
    """Mechanical door interface for a single car."""

    def open_door(self) -> None:
        ...

    def close_door(self) -> None:
        ...


class Timer(Protocol):
    """Blocking wait used between motion and door actions."""

    def wait(self, seconds: float) -> None:
        ...


@dataclass
class SimulatedDoors:
    """Door stand-in that only tracks its own state."""

    door_state: str = "closed"
    cycles: int = 0

    def open_door(self) -> None:
        self.door_state = "open"

    def close_door(self) -> None:
        if self.door_state == "open":
            self.cycles += 1
        self.door_state = "closed"


@dataclass
class SimulatedClock:
    """Timer that advances simulated time instead of sleeping."""

    elapsed: float = 0.0

    def wait(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Cannot wait a negative duration ({seconds})")
        self.elapsed += seconds
