from __future__ import annotations

from typing import List

import pytest
import simpy

from liftsim import Dispatcher, ElevatorTiming, EventBus, SimulationEvent
from liftsim.events import ALL_EVENTS


class EventRecorder:
    def __init__(self) -> None:
        self.events: List[SimulationEvent] = []

    def __call__(self, event: SimulationEvent) -> None:
        self.events.append(event)

    def of(self, kind: str) -> List[SimulationEvent]:
        return [event for event in self.events if event.kind == kind]

    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]


@pytest.fixture
def env() -> simpy.Environment:
    return simpy.Environment()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus) -> EventRecorder:
    recorder = EventRecorder()
    bus.on_event(ALL_EVENTS, recorder)
    return recorder


@pytest.fixture
def make_dispatcher(env, bus):
    def _make(num_elevators: int = 2, num_floors: int = 10, timing: ElevatorTiming = None) -> Dispatcher:
        dispatcher = Dispatcher(env, bus, timing=timing)
        dispatcher.initialize(num_elevators, num_floors)
        return dispatcher

    return _make
