"""Elevator call dispatch simulation primitives."""

from .calls import PendingCall
from .config import ElevatorTiming
from .dispatcher import Dispatcher
from .elevator import Elevator, MovementState
from .errors import (
    AlreadyInitialized,
    DispatchError,
    ElevatorBusy,
    InvalidConfiguration,
    InvalidFloor,
    NoElevatorsConfigured,
    NotInitialized,
)
from .events import (
    Arrived,
    BecameIdle,
    CallAssigned,
    CallQueued,
    CallServed,
    EventBus,
    MoveStarted,
    SimulationEvent,
)
from .simulation import MetricsSnapshot, MetricsTracker, Simulation

__all__ = [
    "AlreadyInitialized",
    "Arrived",
    "BecameIdle",
    "CallAssigned",
    "CallQueued",
    "CallServed",
    "DispatchError",
    "Dispatcher",
    "Elevator",
    "ElevatorBusy",
    "ElevatorTiming",
    "EventBus",
    "InvalidConfiguration",
    "InvalidFloor",
    "MetricsSnapshot",
    "MetricsTracker",
    "MoveStarted",
    "MovementState",
    "NoElevatorsConfigured",
    "NotInitialized",
    "PendingCall",
    "Simulation",
    "SimulationEvent",
]
