"""Replay scripted hall calls and button presses against a controller."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, replace
from functools import partial
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from .actuation import SimulatedClock
from .config import DoorTiming
from .controller import Controller
from .elevator import Elevator
from .requests import Direction

logger = logging.getLogger(__name__)

TRACKED_EVENTS = (
    "dispatch",
    "pending",
    "departure",
    "floor",
    "pickup",
    "arrival",
    "leg",
    "idle",
    "out_of_service",
    "restore",
)


class TimingSettings(BaseModel):
    door_dwell_seconds: float = Field(7.0, ge=0)
    settle_seconds: float = Field(2.0, ge=0)


class BuildingSettings(BaseModel):
    num_floors: int = Field(10, gt=0)
    elevator_count: int = Field(1, gt=0)
    max_distance_threshold: Optional[int] = None
    scheduler: str = "on_the_way"
    # Where each car starts; cars without an entry start at floor 0.
    starting_floors: List[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_starting_floors(self) -> "BuildingSettings":
        if len(self.starting_floors) > self.elevator_count:
            raise ValueError("more starting floors than elevators")
        for floor in self.starting_floors:
            if not 0 <= floor < self.num_floors:
                raise ValueError(f"starting floor {floor} is outside the building")
        return self


class SummonEvent(BaseModel):
    """A rider arrives at ``floor`` and presses the hall button."""

    kind: Literal["summon"] = "summon"
    floor: int
    direction: Direction
    destination: Optional[int] = None

    @model_validator(mode="after")
    def check_destination(self) -> "SummonEvent":
        if self.destination is None:
            return self
        if self.destination == self.floor:
            raise ValueError("destination must differ from the origin floor")
        if Direction.toward(self.floor, self.destination) is not self.direction:
            raise ValueError(
                f"destination {self.destination} is not {self.direction.value} from floor {self.floor}"
            )
        return self


class PressEvent(BaseModel):
    kind: Literal["press"] = "press"
    elevator_id: int
    floor: int


class OutOfServiceEvent(BaseModel):
    kind: Literal["out_of_service"] = "out_of_service"
    elevator_id: int


class RestoreEvent(BaseModel):
    kind: Literal["restore"] = "restore"
    elevator_id: int


ScenarioEvent = Annotated[
    Union[SummonEvent, PressEvent, OutOfServiceEvent, RestoreEvent],
    Field(discriminator="kind"),
]


class ScenarioConfig(BaseModel):
    name: str = "scenario"
    description: Optional[str] = None
    building: BuildingSettings = Field(default_factory=BuildingSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)
    events: List[ScenarioEvent] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_events(self) -> "ScenarioConfig":
        num_floors = self.building.num_floors
        for index, event in enumerate(self.events):
            floors = []
            if isinstance(event, SummonEvent):
                floors = [event.floor] + ([event.destination] if event.destination is not None else [])
            elif isinstance(event, PressEvent):
                floors = [event.floor]
            for floor in floors:
                if not 0 <= floor < num_floors:
                    raise ValueError(f"event {index} refers to floor {floor} outside the building")
            if not isinstance(event, SummonEvent) and not 0 <= event.elevator_id < self.building.elevator_count:
                raise ValueError(f"event {index} refers to unknown elevator {event.elevator_id}")
        return self


@dataclass
class Rider:
    """Represents a rider waiting for, then riding, an elevator."""

    rider_id: int
    origin: int
    direction: Direction
    destination: Optional[int] = None
    elevator_id: Optional[int] = None
    summoned_at: float = 0.0
    boarded_at: Optional[float] = None

    @property
    def wait_time(self) -> Optional[float]:
        if self.boarded_at is None:
            return None
        return self.boarded_at - self.summoned_at


def build_controller(config: ScenarioConfig, clock: Optional[SimulatedClock] = None) -> Controller:
    building = config.building
    timing = DoorTiming(
        door_dwell_seconds=config.timing.door_dwell_seconds,
        settle_seconds=config.timing.settle_seconds,
    )
    elevators = []
    for elevator_id in range(building.elevator_count):
        start = building.starting_floors[elevator_id] if elevator_id < len(building.starting_floors) else 0
        elevators.append(
            Elevator(elevator_id, current_floor=start, target_floor=start, timing=replace(timing))
        )
    return Controller(
        num_floors=building.num_floors,
        elevators=elevators,
        max_distance_threshold=building.max_distance_threshold,
        scheduler_name=building.scheduler,
        clock=clock or SimulatedClock(),
    )


class ScenarioRunner:
    """Feeds scenario events to a controller and boards riders at each pickup."""

    def __init__(self, config: ScenarioConfig) -> None:
        self.config = config
        self.clock = SimulatedClock()
        self.controller = build_controller(config, self.clock)
        self.riders: List[Rider] = []
        self.event_counts: Counter = Counter()
        self._waiting: Dict[Tuple[int, Direction], List[Rider]] = defaultdict(list)

        for event in TRACKED_EVENTS:
            self.controller.on_event(event, partial(self._count, event))
        self.controller.on_event("pickup", self._board)

    def run(self) -> dict:
        for event in self.config.events:
            self._apply(event)
        return self.results()

    def results(self) -> dict:
        boarded = [rider for rider in self.riders if rider.boarded_at is not None]
        waits = [rider.wait_time for rider in boarded]
        return {
            "scenario": self.config.name,
            "description": self.config.description,
            "elapsed_seconds": self.clock.elapsed,
            "riders_boarded": len(boarded),
            "riders_waiting": len(self.riders) - len(boarded),
            "average_wait": sum(waits) / len(waits) if waits else 0.0,
            "event_counts": dict(self.event_counts),
            "riders": [
                {**asdict(rider), "direction": rider.direction.value, "wait_time": rider.wait_time}
                for rider in self.riders
            ],
            "state": self.controller.snapshot(),
        }

    def _apply(self, event: ScenarioEvent) -> None:
        if isinstance(event, SummonEvent):
            rider = Rider(
                rider_id=len(self.riders),
                origin=event.floor,
                direction=event.direction,
                destination=event.destination,
                summoned_at=self.clock.elapsed,
            )
            self.riders.append(rider)
            # Waiting before the call so a trip run inside summon can board them.
            self._waiting[(event.floor, event.direction)].append(rider)
            self.controller.summon(event.floor, event.direction)
        elif isinstance(event, PressEvent):
            self.controller.press_floor_button(event.elevator_id, event.floor)
        elif isinstance(event, OutOfServiceEvent):
            self.controller.take_out_of_service(event.elevator_id)
        elif isinstance(event, RestoreEvent):
            self.controller.restore_elevator(event.elevator_id)

    def _board(self, payload: dict) -> None:
        key = (payload["floor"], Direction(payload["direction"]))
        boarding = self._waiting.pop(key, [])
        for rider in boarding:
            rider.elevator_id = payload["elevator_id"]
            rider.boarded_at = self.clock.elapsed
            logger.debug("Rider %s boarded elevator %s at floor %s", rider.rider_id, rider.elevator_id, rider.origin)
            if rider.destination is not None:
                self.controller.press_floor_button(rider.elevator_id, rider.destination)

    def _count(self, event: str, payload: dict) -> None:
        self.event_counts[event] += 1


def run_scenario(config: Union[ScenarioConfig, dict]) -> dict:
    if not isinstance(config, ScenarioConfig):
        config = ScenarioConfig.model_validate(config)
    return ScenarioRunner(config).run()
