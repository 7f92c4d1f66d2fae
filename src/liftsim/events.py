"""Events published by the dispatch core for presentation layers."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, ClassVar, Dict, List

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"


@dataclass(frozen=True)
class SimulationEvent:
    kind: ClassVar[str] = "event"

    time: float

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["type"] = self.kind
        return payload


@dataclass(frozen=True)
class MoveStarted(SimulationEvent):
    kind: ClassVar[str] = "move_started"

    elevator_id: int
    target_floor: int
    duration: float


@dataclass(frozen=True)
class Arrived(SimulationEvent):
    kind: ClassVar[str] = "arrived"

    elevator_id: int
    floor: int


@dataclass(frozen=True)
class BecameIdle(SimulationEvent):
    kind: ClassVar[str] = "became_idle"

    elevator_id: int
    floor: int


@dataclass(frozen=True)
class CallQueued(SimulationEvent):
    kind: ClassVar[str] = "call_queued"

    call_id: int
    floor: int


@dataclass(frozen=True)
class CallAssigned(SimulationEvent):
    kind: ClassVar[str] = "call_assigned"

    call_id: int
    floor: int
    elevator_id: int


@dataclass(frozen=True)
class CallServed(SimulationEvent):
    kind: ClassVar[str] = "call_served"

    call_id: int
    floor: int
    elevator_id: int
    wait_time: float


EventCallback = Callable[[SimulationEvent], None]


class EventBus:
    """Synchronous fan-out of events to subscribers, keyed by event kind."""

    def __init__(self) -> None:
        self.event_hooks: Dict[str, List[EventCallback]] = {}

    def on_event(self, event: str, callback: EventCallback) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def off_event(self, event: str, callback: EventCallback) -> None:
        hooks = self.event_hooks.get(event, [])
        if callback in hooks:
            hooks.remove(callback)

    def emit(self, event: SimulationEvent) -> None:
        logger.debug("emit %s", event)
        # Catch-all subscribers see an event before anything it triggers.
        for callback in self.event_hooks.get(ALL_EVENTS, []):
            callback(event)
        for callback in self.event_hooks.get(event.kind, []):
            callback(event)
