from __future__ import annotations

from typing import Iterable, Optional

from .interface import ElevatorSnapshot, HallCall
from .utils import floor_distance, is_on_the_way


class OnTheWayScheduler:
    """Prefers a car already heading past the caller over waking an idle one.

    A moving car counts only when it travels in the requested direction, has not
    passed the floor yet and is within ``max_distance_threshold`` floors. The
    closest idle car is the fallback. Ties go to the first car seen.
    """

    def select_elevator(
        self,
        elevator_state: Iterable[ElevatorSnapshot],
        call: HallCall,
        max_distance_threshold: int,
    ) -> Optional[int]:
        best_moving: Optional[ElevatorSnapshot] = None
        best_idle: Optional[ElevatorSnapshot] = None

        for elevator in elevator_state:
            distance = floor_distance(elevator, call.floor)
            if not elevator.moving:
                if best_idle is None or distance < floor_distance(best_idle, call.floor):
                    best_idle = elevator
            elif is_on_the_way(elevator, call) and distance <= max_distance_threshold:
                if best_moving is None or distance < floor_distance(best_moving, call.floor):
                    best_moving = elevator

        chosen = best_moving or best_idle
        return chosen.elevator_id if chosen is not None else None
