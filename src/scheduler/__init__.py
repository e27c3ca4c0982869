from __future__ import annotations

from typing import Dict, Type

from .interface import ElevatorSnapshot, HallCall, Scheduler
from .on_the_way import OnTheWayScheduler

__all__ = [
    "ElevatorSnapshot",
    "HallCall",
    "OnTheWayScheduler",
    "Scheduler",
    "get_scheduler",
]


SCHEDULER_REGISTRY: Dict[str, Type[Scheduler]] = {
    "on_the_way": OnTheWayScheduler,
}


def get_scheduler(name: str) -> Scheduler:
    cls = SCHEDULER_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown scheduler '{name}'. Available: {', '.join(SCHEDULER_REGISTRY)}")
    return cls()
