from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict
from typing import Deque, Dict, List, Optional

import simpy

from assignment import ElevatorSnapshot, Scheduler, get_scheduler

from .calls import PendingCall
from .config import ElevatorTiming
from .elevator import Elevator
from .errors import (
    AlreadyInitialized,
    InvalidConfiguration,
    InvalidFloor,
    NoElevatorsConfigured,
    NotInitialized,
)
from .events import Arrived, CallAssigned, CallQueued, CallServed, EventBus

logger = logging.getLogger(__name__)


class Dispatcher:
    """Matches pending floor calls to idle elevators, oldest call first.

    Calls wait in a single FIFO. Each assignment attempt looks only at the
    head of that queue and hands it to one elevator at most; when no car is
    idle the call stays put. Elevators that run out of work post their id to
    the dispatcher's mailbox, and the dispatcher's own process retries the
    head of the queue once per message. All of this runs on one simpy
    environment, so a call can never be handed to two cars.
    """

    def __init__(
        self,
        env: simpy.Environment,
        events: EventBus,
        timing: Optional[ElevatorTiming] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.env = env
        self.events = events
        self.timing = timing or ElevatorTiming()
        self.scheduler = scheduler or get_scheduler("nearest_idle")
        self.fleet: Dict[int, Elevator] = {}
        self.pending_calls: Deque[PendingCall] = deque()
        self.num_floors = 0
        self._initialized = False
        self._mailbox: Optional[simpy.Store] = None
        self._in_flight: Dict[int, Deque[PendingCall]] = {}
        self._next_call_id = 0

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, num_elevators: int, num_floors: int) -> None:
        if self._initialized:
            raise AlreadyInitialized()
        if num_elevators <= 0:
            raise NoElevatorsConfigured(num_elevators)
        if num_floors < 1:
            raise InvalidConfiguration(f"A building needs at least one floor, got {num_floors}")

        self.num_floors = num_floors
        self.fleet = {
            elevator_id: Elevator(
                elevator_id,
                env=self.env,
                events=self.events,
                timing=self.timing,
                on_free=self._notify_free,
            )
            for elevator_id in range(1, num_elevators + 1)
        }
        self._in_flight = {elevator_id: deque() for elevator_id in self.fleet}
        self._mailbox = simpy.Store(self.env)
        self.env.process(self._serve_free_elevators())
        self.events.on_event(Arrived.kind, self._on_arrived)
        self._initialized = True
        logger.info("Dispatcher ready with %d elevator(s) over %d floor(s)", num_elevators, num_floors)

    def handle_call(self, floor: int) -> PendingCall:
        self._require_initialized()
        self.validate_floor(floor)

        call = PendingCall(call_id=self._next_call_id, floor=floor, requested_at=self.env.now)
        self._next_call_id += 1
        self.pending_calls.append(call)
        logger.info("Call %d queued for floor %d (%d pending)", call.call_id, floor, len(self.pending_calls))
        self.events.emit(CallQueued(time=self.env.now, call_id=call.call_id, floor=floor))
        self.assign_next()
        return call

    def assign_next(self) -> Optional[PendingCall]:
        self._require_initialized()
        if not self.pending_calls:
            return None

        call = self.pending_calls[0]
        elevator_id = self.scheduler.select_elevator(self.snapshot_elevators(), call.floor)
        if elevator_id is None:
            logger.debug("No idle elevator for floor %d; %d call(s) waiting", call.floor, len(self.pending_calls))
            return None

        self.pending_calls.popleft()
        call.record_assignment(elevator_id, self.env.now)
        self._in_flight[elevator_id].append(call)
        logger.info("Call %d for floor %d assigned to elevator %d", call.call_id, call.floor, elevator_id)
        self.events.emit(
            CallAssigned(time=self.env.now, call_id=call.call_id, floor=call.floor, elevator_id=elevator_id)
        )
        self.fleet[elevator_id].enqueue_destination(call.floor)
        return call

    def validate_floor(self, floor: int) -> None:
        if isinstance(floor, bool) or not isinstance(floor, int) or not 0 <= floor < self.num_floors:
            raise InvalidFloor(floor, self.num_floors)

    def snapshot_elevators(self) -> List[ElevatorSnapshot]:
        return [elevator.snapshot() for elevator in self.fleet.values()]

    def snapshot(self) -> dict:
        return {
            "num_floors": self.num_floors,
            "elevators": [asdict(snapshot) for snapshot in self.snapshot_elevators()],
            "pending_calls": [asdict(call) for call in self.pending_calls],
        }

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitialized()

    def _notify_free(self, elevator: Elevator) -> None:
        self._mailbox.put(elevator.elevator_id)

    def _serve_free_elevators(self):
        while True:
            elevator_id = yield self._mailbox.get()
            logger.debug("Elevator %d reported free at t=%s", elevator_id, self.env.now)
            self.assign_next()

    def _on_arrived(self, event: Arrived) -> None:
        in_flight = self._in_flight.get(event.elevator_id)
        if not in_flight or in_flight[0].floor != event.floor:
            return
        call = in_flight.popleft()
        call.record_service(self.env.now)
        self.events.emit(
            CallServed(
                time=self.env.now,
                call_id=call.call_id,
                floor=call.floor,
                elevator_id=event.elevator_id,
                wait_time=call.wait_time,
            )
        )
