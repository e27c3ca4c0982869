from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol


@dataclass(frozen=True)
class ElevatorSnapshot:
    """Lightweight view of an in-service elevator for scheduling decisions."""

    elevator_id: int
    current_floor: int
    target_floor: int
    direction: int  # +1 up, -1 down
    moving: bool


@dataclass(frozen=True)
class HallCall:
    """Representation of a hall call for schedulers."""

    floor: int
    direction: int  # +1 up, -1 down


class Scheduler(Protocol):
    """Strategy interface for choosing which elevator answers a hall call."""

    def select_elevator(
        self,
        elevator_state: Iterable[ElevatorSnapshot],
        call: HallCall,
        max_distance_threshold: int,
    ) -> Optional[int]:
        """
        Return the id of the elevator that should answer ``call``.

        ``None`` means no elevator is suitable right now and the call should
        wait in the controller's pending queue.
        """
        ...
