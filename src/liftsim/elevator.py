from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Optional

import simpy

from assignment import ElevatorSnapshot

from .config import ElevatorTiming
from .errors import ElevatorBusy
from .events import Arrived, BecameIdle, EventBus, MoveStarted

logger = logging.getLogger(__name__)


class MovementState(str, Enum):
    IDLE = "idle"
    MOVING = "moving"
    DWELLING = "dwelling"


@dataclass
class Elevator:
    """A car that works through its own destination queue one floor at a time.

    Destinations are visited strictly in the order they were enqueued. A move
    always runs to completion; there is no way to redirect a car mid-flight.
    After arriving the car dwells with doors open before it looks at its queue
    again, and it only reports itself free once that queue is empty.
    """

    elevator_id: int
    env: simpy.Environment = field(repr=False)
    events: EventBus = field(repr=False)
    timing: ElevatorTiming = field(default_factory=ElevatorTiming)
    on_free: Optional[Callable[["Elevator"], None]] = field(default=None, repr=False)
    current_floor: int = 0
    state: MovementState = MovementState.IDLE
    target_floor: Optional[int] = None
    destinations: Deque[int] = field(default_factory=deque)

    @property
    def is_idle(self) -> bool:
        return self.state is MovementState.IDLE

    def enqueue_destination(self, floor: int) -> None:
        self.destinations.append(floor)
        if self.is_idle:
            self.process_next()

    def process_next(self) -> None:
        if not self.destinations:
            self.state = MovementState.IDLE
            logger.debug("Elevator %s idle at floor %s", self.elevator_id, self.current_floor)
            self.events.emit(
                BecameIdle(time=self.env.now, elevator_id=self.elevator_id, floor=self.current_floor)
            )
            if self.on_free is not None:
                self.on_free(self)
            return

        self.begin_move(self.destinations.popleft())

    def begin_move(self, target_floor: int) -> float:
        if self.target_floor is not None:
            raise ElevatorBusy(self.elevator_id, self.target_floor)
        duration = self.timing.travel_time(abs(self.current_floor - target_floor))
        self.state = MovementState.MOVING
        self.target_floor = target_floor
        logger.debug(
            "Elevator %s moving %s -> %s, arrival in %s",
            self.elevator_id,
            self.current_floor,
            target_floor,
            duration,
        )
        self.events.emit(
            MoveStarted(
                time=self.env.now,
                elevator_id=self.elevator_id,
                target_floor=target_floor,
                duration=duration,
            )
        )
        self.env.process(self._travel(target_floor, duration))
        return duration

    def on_arrival(self, target_floor: int) -> None:
        self.current_floor = target_floor
        self.target_floor = None
        self.state = MovementState.DWELLING
        logger.debug("Elevator %s arrived at floor %s", self.elevator_id, target_floor)
        self.events.emit(Arrived(time=self.env.now, elevator_id=self.elevator_id, floor=target_floor))
        self.env.process(self._dwell())

    def snapshot(self) -> ElevatorSnapshot:
        return ElevatorSnapshot(
            elevator_id=self.elevator_id,
            current_floor=self.current_floor,
            state=self.state.value,
            target_floor=self.target_floor,
            destinations=tuple(self.destinations),
        )

    def _travel(self, target_floor: int, duration: float):
        yield self.env.timeout(duration)
        self.on_arrival(target_floor)

    def _dwell(self):
        yield self.env.timeout(self.timing.dwell_time)
        self.process_next()
