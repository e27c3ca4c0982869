from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Callable, Deque, Dict, List, Optional

from .actuation import SimulatedClock, Timer
from .config import DoorTiming, clamp_distance_threshold, default_distance_threshold
from .elevator import Elevator
from .errors import ElevatorStateError, FloorRangeError
from .requests import Direction, ElevatorState, FloorRequest
from scheduler import ElevatorSnapshot, HallCall, Scheduler, get_scheduler

logger = logging.getLogger(__name__)


@dataclass
class Controller:
    """Central dispatcher for every elevator in a building.

    Owns the per-floor summon flags, the queue of calls no elevator could take
    yet, and the fleet. All entry points hold ``lock`` so a single caller at a
    time mutates that shared state; it is re-entrant because event hooks fired
    while doors are open may summon or press buttons themselves.
    """

    num_floors: int
    elevators: List[Elevator] = field(default_factory=list)
    max_distance_threshold: Optional[int] = None
    scheduler_name: str = "on_the_way"
    clock: Timer = field(default_factory=SimulatedClock)
    scheduler: Scheduler = field(init=False)
    up_summons: List[bool] = field(init=False)
    down_summons: List[bool] = field(init=False)
    pending_requests: Deque[FloorRequest] = field(init=False, default_factory=deque)
    event_hooks: Dict[str, List[Callable[[dict], None]]] = field(init=False, default_factory=dict)
    lock: threading.RLock = field(init=False, repr=False, default_factory=threading.RLock)

    def __post_init__(self) -> None:
        if self.num_floors <= 0:
            raise ValueError(f"A building needs at least one floor, got {self.num_floors}")
        if not self.elevators:
            raise ValueError("A controller needs at least one elevator")
        ids = [elevator.elevator_id for elevator in self.elevators]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Elevator ids must be unique, got {ids}")

        self.scheduler = get_scheduler(self.scheduler_name)
        self.up_summons = [False] * self.num_floors
        self.down_summons = [False] * self.num_floors
        if self.max_distance_threshold is None:
            self.max_distance_threshold = default_distance_threshold(self.num_floors, len(self.elevators))
        else:
            self.set_max_distance_threshold(self.max_distance_threshold)
        for elevator in self.elevators:
            elevator.attach(self)

    @classmethod
    def uniform(
        cls,
        num_floors: int,
        num_elevators: int,
        timing: Optional[DoorTiming] = None,
        **kwargs,
    ) -> "Controller":
        """Build a controller over ``num_elevators`` identical cars parked at floor 0."""
        if num_elevators <= 0:
            raise ValueError(f"A controller needs at least one elevator, got {num_elevators}")
        timing = timing or DoorTiming()
        elevators = [Elevator(i, timing=replace(timing)) for i in range(num_elevators)]
        return cls(num_floors=num_floors, elevators=elevators, **kwargs)

    @property
    def num_elevators(self) -> int:
        return len(self.elevators)

    def set_max_distance_threshold(self, max_floors: int) -> None:
        self.max_distance_threshold = clamp_distance_threshold(max_floors, self.num_floors)

    def check_floor(self, floor: int) -> None:
        if not 0 <= floor < self.num_floors:
            raise FloorRangeError(floor, self.num_floors)

    def summons_for(self, direction: Direction) -> List[bool]:
        return self.up_summons if direction is Direction.UP else self.down_summons

    def summon(self, floor: int, direction: Direction) -> Optional[Elevator]:
        """Handle a hall call and return the elevator sent to answer it.

        The call goes to a car already heading past the floor when one is close
        enough, else to the nearest idle car. With neither available the call
        waits in ``pending_requests`` and ``None`` is returned.
        """
        with self.lock:
            self.check_floor(floor)
            self.summons_for(direction)[floor] = True
            return self._dispatch(FloorRequest(floor, direction))

    def _dispatch(self, request: FloorRequest) -> Optional[Elevator]:
        floor, direction = request.floor, request.direction
        elevator = self.select_elevator(request)
        if elevator is None:
            self.pending_requests.append(request)
            logger.info(
                "No elevator available for floor %s (%s), %s call(s) pending",
                floor,
                direction.value,
                len(self.pending_requests),
            )
            self.emit("pending", {"floor": floor, "direction": direction.value})
            return None

        logger.info(
            "Dispatching elevator %s (%s) to floor %s (%s)",
            elevator.elevator_id,
            elevator.state.value,
            floor,
            direction.value,
        )
        self.emit(
            "dispatch",
            {"elevator_id": elevator.elevator_id, "floor": floor, "direction": direction.value},
        )
        if elevator.state is ElevatorState.MOVING:
            elevator.extend_route(floor)
        elif elevator.state is ElevatorState.OUT_OF_SERVICE:
            raise ElevatorStateError(f"Tried to dispatch out of service elevator {elevator.elevator_id}")
        else:
            elevator.go_to_floor(floor)
        return elevator

    def select_elevator(self, request: FloorRequest) -> Optional[Elevator]:
        snapshots = self._snapshot_elevators()
        call = HallCall(floor=request.floor, direction=request.direction.step)
        elevator_id = self.scheduler.select_elevator(snapshots, call, self.max_distance_threshold)
        if elevator_id is None:
            return None
        return self.get_elevator(elevator_id)

    def press_floor_button(self, elevator_id: int, floor: int) -> None:
        self.get_elevator(elevator_id).press_floor_button(floor)

    def pop_oldest_pending(self) -> Optional[FloorRequest]:
        with self.lock:
            if not self.pending_requests:
                return None
            return self.pending_requests.popleft()

    def discard_pending(self, request: FloorRequest) -> None:
        """Drop queued copies of a call some elevator has just picked up."""
        with self.lock:
            if request not in self.pending_requests:
                return
            kept = [pending for pending in self.pending_requests if pending != request]
            self.pending_requests.clear()
            self.pending_requests.extend(kept)

    def take_out_of_service(self, elevator_id: int) -> None:
        with self.lock:
            elevator = self.get_elevator(elevator_id)
            stranded = elevator.route_calls()
            elevator.take_out_of_service()
            logger.info("Elevator %s out of service at floor %s", elevator_id, elevator.current_floor)
            self.emit("out_of_service", {"elevator_id": elevator_id, "floor": elevator.current_floor})

            # Calls this car had taken on go back through selection.
            for request in stranded:
                if request in self.pending_requests or not self.summons_for(request.direction)[request.floor]:
                    continue
                self._dispatch(request)

    def restore_elevator(self, elevator_id: int) -> None:
        """Put an elevator back in service and hand it the oldest pending call."""
        with self.lock:
            elevator = self.get_elevator(elevator_id)
            if elevator.state is not ElevatorState.OUT_OF_SERVICE:
                return
            elevator.restore_service()
            logger.info("Elevator %s restored at floor %s", elevator_id, elevator.current_floor)
            self.emit("restore", {"elevator_id": elevator_id, "floor": elevator.current_floor})

            request = self.pop_oldest_pending()
            if request is not None:
                elevator.go_to_floor(request.floor)

    def get_elevator(self, elevator_id: int) -> Elevator:
        for elevator in self.elevators:
            if elevator.elevator_id == elevator_id:
                return elevator
        raise ValueError(f"Unknown elevator {elevator_id}")

    def on_event(self, event: str, callback: Callable[[dict], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: dict) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)

    def snapshot(self) -> dict:
        return {
            "num_floors": self.num_floors,
            "max_distance_threshold": self.max_distance_threshold,
            "up_summons": [floor for floor, waiting in enumerate(self.up_summons) if waiting],
            "down_summons": [floor for floor, waiting in enumerate(self.down_summons) if waiting],
            "pending": [
                {"floor": request.floor, "direction": request.direction.value}
                for request in self.pending_requests
            ],
            "elevators": [
                {
                    "id": elevator.elevator_id,
                    "current_floor": elevator.current_floor,
                    "target_floor": elevator.target_floor,
                    "queued_target_floor": elevator.queued_target_floor,
                    "direction": elevator.direction.value,
                    "state": elevator.state.value,
                }
                for elevator in self.elevators
            ],
        }

    def _snapshot_elevators(self) -> List[ElevatorSnapshot]:
        return [
            ElevatorSnapshot(
                elevator_id=elevator.elevator_id,
                current_floor=elevator.current_floor,
                target_floor=elevator.target_floor,
                direction=elevator.direction.step,
                moving=elevator.state is ElevatorState.MOVING,
            )
            for elevator in self.elevators
            if elevator.in_service()
        ]
