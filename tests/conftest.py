from __future__ import annotations

from typing import Dict, List

import pytest

from control import Controller, Elevator


class RecordingActuator:
    """Doors and timer in one, logging every call in order."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def open_door(self) -> None:
        self.calls.append("open")

    def close_door(self) -> None:
        self.calls.append("close")

    def wait(self, seconds: float) -> None:
        self.calls.append(f"wait {seconds}")


class EventLog:
    """Collects controller events as (name, payload) pairs."""

    def __init__(self, controller: Controller, *events: str) -> None:
        self.entries: List[tuple] = []
        for event in events:
            controller.on_event(event, lambda payload, event=event: self.entries.append((event, payload)))

    def payloads(self, event: str) -> List[Dict]:
        return [payload for name, payload in self.entries if name == event]

    def floors(self) -> List[int]:
        return [payload["floor"] for payload in self.payloads("floor")]


@pytest.fixture
def single_car() -> Controller:
    return Controller.uniform(num_floors=10, num_elevators=1)


@pytest.fixture
def two_cars() -> Controller:
    return Controller.uniform(num_floors=10, num_elevators=2, max_distance_threshold=3)


@pytest.fixture
def recorder() -> RecordingActuator:
    return RecordingActuator()


@pytest.fixture
def recorded_car(recorder: RecordingActuator) -> Controller:
    return Controller(num_floors=10, elevators=[Elevator(0, doors=recorder)], clock=recorder)
