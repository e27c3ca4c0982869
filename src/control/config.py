from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DoorTiming:
    """Durations used around every door cycle, in simulated seconds."""

    door_dwell_seconds: float = 7.0
    settle_seconds: float = 2.0


def default_distance_threshold(num_floors: int, num_elevators: int) -> int:
    return clamp_distance_threshold(num_floors // num_elevators, num_floors)


def clamp_distance_threshold(value: int, num_floors: int) -> int:
    return max(min(num_floors, value), 0)
