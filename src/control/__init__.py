"""Elevator dispatch primitives for liftdispatch."""

from .actuation import Doors, SimulatedClock, SimulatedDoors, Timer
from .config import DoorTiming
from .controller import Controller
from .elevator import Elevator
from .errors import DispatchError, ElevatorStateError, FloorRangeError
from .requests import Direction, ElevatorState, FloorRequest
from .scenario import ScenarioConfig, ScenarioRunner, build_controller, run_scenario

__all__ = [
    "Controller",
    "Direction",
    "DispatchError",
    "DoorTiming",
    "Doors",
    "Elevator",
    "ElevatorState",
    "ElevatorStateError",
    "FloorRangeError",
    "FloorRequest",
    "ScenarioConfig",
    "ScenarioRunner",
    "SimulatedClock",
    "SimulatedDoors",
    "Timer",
    "build_controller",
    "run_scenario",
]
