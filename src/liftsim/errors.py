"""Errors raised to callers of the dispatch core.

Every error is a caller-contract violation raised synchronously; nothing in
the core retries them. Each class also derives from the matching builtin so
callers that only know about ``ValueError``/``RuntimeError`` still catch them.
"""
from __future__ import annotations


class DispatchError(Exception):
    """Base class for dispatch core errors."""


class InvalidFloor(DispatchError, ValueError):
    def __init__(self, floor: object, num_floors: int) -> None:
        super().__init__(f"Floor {floor!r} is outside the building (valid floors: 0-{num_floors - 1})")
        self.floor = floor
        self.num_floors = num_floors


class NotInitialized(DispatchError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Dispatcher has not been initialized")


class AlreadyInitialized(DispatchError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Dispatcher is already initialized")


class NoElevatorsConfigured(DispatchError, ValueError):
    def __init__(self, num_elevators: int) -> None:
        super().__init__(f"At least one elevator is required, got {num_elevators}")
        self.num_elevators = num_elevators


class InvalidConfiguration(DispatchError, ValueError):
    pass


class ElevatorBusy(DispatchError, RuntimeError):
    def __init__(self, elevator_id: int, target_floor: int) -> None:
        super().__init__(f"Elevator {elevator_id} is already moving to floor {target_floor}")
        self.elevator_id = elevator_id
        self.target_floor = target_floor
