from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, List, Optional

from .actuation import Doors, SimulatedDoors
from .config import DoorTiming
from .errors import ElevatorStateError
from .requests import Direction, ElevatorState, FloorRequest

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .controller import Controller

logger = logging.getLogger(__name__)


@dataclass
class Elevator:
    """A single car that runs its trips to completion under a controller."""

    elevator_id: int
    current_floor: int = 0
    target_floor: int = 0
    # Deferred destination pressed behind the car, served on the next leg.
    queued_target_floor: Optional[int] = None
    direction: Direction = Direction.UP
    state: ElevatorState = ElevatorState.IDLE
    timing: DoorTiming = field(default_factory=DoorTiming)
    doors: Doors = field(default_factory=SimulatedDoors, repr=False)
    controller: Optional["Controller"] = field(default=None, repr=False, compare=False)

    def attach(self, controller: "Controller") -> None:
        self.controller = controller

    def in_service(self) -> bool:
        return self.state is not ElevatorState.OUT_OF_SERVICE

    def press_floor_button(self, floor_requested: int) -> None:
        """Handle a destination button pressed inside the car.

        A floor ahead of the car extends the current leg. A floor behind it is
        deferred to ``queued_target_floor`` so the car never reverses mid-leg.
        Presses only move the leg's end, so the doors open at the end of the
        leg and not at every pressed floor passed on the way.
        """
        controller = self._require_controller()
        with controller.lock:
            controller.check_floor(floor_requested)

            if self.state is ElevatorState.OUT_OF_SERVICE:
                logger.warning(
                    "Elevator %s is out of service, ignoring press for floor %s",
                    self.elevator_id,
                    floor_requested,
                )
                return
            if self.state is ElevatorState.IDLE:
                self.go_to_floor(floor_requested)
                return

            if self.direction is Direction.UP:
                if floor_requested >= self.current_floor:
                    self.target_floor = max(self.target_floor, floor_requested)
                elif self.queued_target_floor is None:
                    self.queued_target_floor = floor_requested
                else:
                    self.queued_target_floor = min(self.queued_target_floor, floor_requested)
            else:
                if floor_requested <= self.current_floor:
                    self.target_floor = min(self.target_floor, floor_requested)
                elif self.queued_target_floor is None:
                    self.queued_target_floor = floor_requested
                else:
                    self.queued_target_floor = max(self.queued_target_floor, floor_requested)

    def extend_route(self, floor: int) -> None:
        """Stretch the current leg so it reaches ``floor`` without reversing."""
        if self.direction is Direction.UP:
            self.target_floor = max(self.target_floor, floor)
        else:
            self.target_floor = min(self.target_floor, floor)

    def go_to_floor(self, floor: int) -> None:
        """Send an idle elevator to ``floor`` and run until it has no work left.

        Legs chain inside this call: queued destinations, callers waiting at
        the turnaround floor and pending hall calls are all served before the
        car returns to idle.
        """
        controller = self._require_controller()
        with controller.lock:
            controller.check_floor(floor)
            if self.state is not ElevatorState.IDLE:
                raise ElevatorStateError(
                    f"Elevator {self.elevator_id} is {self.state.value}, only idle elevators can start a trip"
                )

            self.target_floor = floor
            self.state = ElevatorState.MOVING
            self.direction = Direction.toward(self.current_floor, self.target_floor)
            self._claim_pending_requests()
            logger.info(
                "Elevator %s departing floor %s for floor %s (%s)",
                self.elevator_id,
                self.current_floor,
                self.target_floor,
                self.direction.value,
            )
            controller.emit("departure", self._payload())
            self._run_trip()

    def route_calls(self) -> List[FloorRequest]:
        """Hall calls still waiting on the rest of the current leg."""
        if self.state is not ElevatorState.MOVING:
            return []
        controller = self._require_controller()
        summons = controller.summons_for(self.direction)
        step = self.direction.step
        calls = [
            FloorRequest(floor, self.direction)
            for floor in range(self.current_floor, self.target_floor + step, step)
            if summons[floor]
        ]
        if controller.summons_for(self.direction.opposite)[self.target_floor]:
            calls.append(FloorRequest(self.target_floor, self.direction.opposite))
        return calls

    def take_out_of_service(self) -> None:
        self.state = ElevatorState.OUT_OF_SERVICE
        self.queued_target_floor = None
        self.target_floor = self.current_floor

    def restore_service(self) -> None:
        if self.state is ElevatorState.OUT_OF_SERVICE:
            self.state = ElevatorState.IDLE
            self.target_floor = self.current_floor

    def _run_trip(self) -> None:
        while self.state is ElevatorState.MOVING:
            self._travel_leg()
            if self.state is not ElevatorState.MOVING:
                break
            # Someone pressed a floor ahead while the doors were open.
            if self.current_floor != self.target_floor:
                continue
            if not self._start_next_leg():
                break

    def _travel_leg(self) -> None:
        moved = False
        served = self._visit(self.current_floor)
        while self.state is ElevatorState.MOVING and self.current_floor != self.target_floor:
            self.current_floor += self.direction.step
            moved = True
            served = self._visit(self.current_floor)

        # A caller waiting the other way here gets the doors when the car turns around.
        waiting_opposite = self._require_controller().summons_for(self.direction.opposite)[self.current_floor]
        if moved and not served and not waiting_opposite and self.state is ElevatorState.MOVING:
            self._cycle_doors("arrival")

    def _visit(self, floor: int) -> bool:
        controller = self._require_controller()
        logger.debug("Elevator %s at floor %s (%s)", self.elevator_id, floor, self.direction.value)
        controller.emit("floor", self._payload())

        summons = controller.summons_for(self.direction)
        if not summons[floor]:
            return False
        self._cycle_doors("pickup")
        summons[floor] = False
        controller.discard_pending(FloorRequest(floor, self.direction))
        return True

    def _start_next_leg(self) -> bool:
        controller = self._require_controller()

        if controller.summons_for(self.direction)[self.current_floor]:
            # Called here after the floor was visited; serve it with a zero-length leg.
            self.target_floor = self.current_floor
        elif self.queued_target_floor is not None:
            self.target_floor = self.queued_target_floor
            self.queued_target_floor = None
            self.direction = Direction.toward(self.current_floor, self.target_floor)
        elif controller.summons_for(self.direction.opposite)[self.current_floor]:
            # Turn around in place for a caller waiting to go the other way.
            self.direction = self.direction.opposite
        else:
            # Oldest call first, regardless of how far away it is.
            request = controller.pop_oldest_pending()
            if request is None:
                self.state = ElevatorState.IDLE
                logger.info("Elevator %s idle at floor %s", self.elevator_id, self.current_floor)
                controller.emit("idle", self._payload())
                return False
            self.target_floor = request.floor
            if request.floor == self.current_floor:
                self.direction = request.direction
            else:
                self.direction = Direction.toward(self.current_floor, self.target_floor)

        self._claim_pending_requests()
        logger.info(
            "Elevator %s new leg from floor %s to floor %s (%s)",
            self.elevator_id,
            self.current_floor,
            self.target_floor,
            self.direction.value,
        )
        controller.emit("leg", self._payload())
        return True

    def _claim_pending_requests(self) -> None:
        controller = self._require_controller()
        pending = controller.pending_requests
        if not pending:
            return

        kept: Deque[FloorRequest] = deque()
        for request in pending:
            if self._is_request_in_range(request, controller.max_distance_threshold):
                self.extend_route(request.floor)
                logger.info(
                    "Elevator %s claimed pending call at floor %s (%s)",
                    self.elevator_id,
                    request.floor,
                    request.direction.value,
                )
            else:
                kept.append(request)
        pending.clear()
        pending.extend(kept)

    def _is_request_in_range(self, request: FloorRequest, max_distance_threshold: int) -> bool:
        if request.direction is not self.direction:
            return False
        if self.direction is Direction.UP:
            highest_floor = max(self.target_floor, self.current_floor + max_distance_threshold)
            return self.current_floor <= request.floor <= highest_floor
        lowest_floor = min(self.target_floor, self.current_floor - max_distance_threshold)
        return lowest_floor <= request.floor <= self.current_floor

    def _cycle_doors(self, event: str) -> None:
        controller = self._require_controller()
        clock = controller.clock
        # Settle before opening, dwell for boarding, settle again before moving.
        clock.wait(self.timing.settle_seconds)
        self.doors.open_door()
        controller.emit(event, self._payload())
        clock.wait(self.timing.door_dwell_seconds)
        self.doors.close_door()
        clock.wait(self.timing.settle_seconds)

    def _payload(self) -> dict:
        return {
            "elevator_id": self.elevator_id,
            "floor": self.current_floor,
            "target_floor": self.target_floor,
            "direction": self.direction.value,
            "state": self.state.value,
        }

    def _require_controller(self) -> "Controller":
        if self.controller is None:
            raise ElevatorStateError(f"Elevator {self.elevator_id} is not attached to a controller")
        return self.controller
