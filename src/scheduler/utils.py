from __future__ import annotations

from .interface import ElevatorSnapshot, HallCall


def floor_distance(elevator: ElevatorSnapshot, floor: int) -> int:
    """Number of floors between the elevator and ``floor``."""
    return abs(floor - elevator.current_floor)


def is_on_the_way(elevator: ElevatorSnapshot, call: HallCall) -> bool:
    """True when the elevator travels the caller's way and has not passed the floor yet."""

    if call.direction != elevator.direction:
        return False
    if elevator.direction > 0:
        return elevator.current_floor <= call.floor
    return elevator.current_floor >= call.floor
