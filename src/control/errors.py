from __future__ import annotations


class DispatchError(Exception):
    """Base class for errors raised by the dispatch model."""


class FloorRangeError(DispatchError, ValueError):
    """A floor argument fell outside ``[0, num_floors)``."""

    def __init__(self, floor: int, num_floors: int) -> None:
        super().__init__(f"Floor {floor} is out of range (0..{num_floors - 1})")
        self.floor = floor
        self.num_floors = num_floors


class ElevatorStateError(DispatchError, RuntimeError):
    """An elevator was asked to do something its state forbids.

    Reaching this through the public API points at a scheduling bug, so it is
    never caught inside the package.
    """
