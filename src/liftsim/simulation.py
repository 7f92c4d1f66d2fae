from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import simpy

from assignment import get_scheduler

from .calls import PendingCall
from .config import ElevatorTiming
from .dispatcher import Dispatcher
from .events import CallQueued, CallServed, EventBus, EventCallback


@dataclass
class MetricsSnapshot:
    time: float
    calls_received: int
    calls_served: int
    pending: int
    average_wait: float
    wait_p95: float


class MetricsTracker:
    def __init__(self) -> None:
        self.wait_times: List[float] = []
        self.calls_received: int = 0

    def record_call(self, event: CallQueued) -> None:
        self.calls_received += 1

    def record_service(self, event: CallServed) -> None:
        self.wait_times.append(event.wait_time)

    def _average(self, values: List[float]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    def _percentile(self, values: List[float], percentile: float) -> float:
        if not values:
            return 0.0
        ordered = sorted(values)
        k = (len(ordered) - 1) * percentile
        lower = math.floor(k)
        upper = math.ceil(k)
        if lower == upper:
            return float(ordered[int(k)])
        return float(ordered[lower] * (upper - k) + ordered[upper] * (k - lower))

    def snapshot(self, time: float, pending: int) -> MetricsSnapshot:
        return MetricsSnapshot(
            time=time,
            calls_received=self.calls_received,
            calls_served=len(self.wait_times),
            pending=pending,
            average_wait=self._average(self.wait_times),
            wait_p95=self._percentile(self.wait_times, 0.95),
        )


class Simulation:
    """Discrete-event elevator dispatch simulation on a simpy clock.

    Time only moves when the caller advances it, which keeps runs
    deterministic: tests and offline scenarios step the clock directly and the
    API service advances it from a background task.
    """

    def __init__(
        self,
        num_floors: int,
        num_elevators: int,
        timing: Optional[ElevatorTiming] = None,
        scheduler_name: str = "nearest_idle",
        env: Optional[simpy.Environment] = None,
    ) -> None:
        self.env = env or simpy.Environment()
        self.events = EventBus()
        self.metrics = MetricsTracker()
        self.events.on_event(CallQueued.kind, self.metrics.record_call)
        self.events.on_event(CallServed.kind, self.metrics.record_service)
        self.scheduler_name = scheduler_name
        self.dispatcher = Dispatcher(
            self.env,
            self.events,
            timing=timing,
            scheduler=get_scheduler(scheduler_name),
        )
        self.dispatcher.initialize(num_elevators, num_floors)

    @property
    def current_time(self) -> float:
        return self.env.now

    def request_floor(self, floor: int) -> PendingCall:
        return self.dispatcher.handle_call(floor)

    def schedule_call(self, at: float, floor: int) -> None:
        """Press the call button for ``floor`` once the clock reaches ``at``."""
        self.dispatcher.validate_floor(floor)
        if at < self.env.now:
            raise ValueError(f"Cannot schedule a call in the past (t={at}, now={self.env.now})")
        self.env.process(self._delayed_call(at - self.env.now, floor))

    def advance(self, duration: float) -> None:
        if duration < 0:
            raise ValueError(f"Cannot advance the clock by a negative duration ({duration})")
        if duration == 0:
            return
        self.env.run(until=self.env.now + duration)

    def run_until_quiescent(self) -> None:
        """Run until no moves, dwells or scheduled calls remain."""
        self.env.run()

    def on_event(self, event: str, callback: EventCallback) -> None:
        self.events.on_event(event, callback)

    def off_event(self, event: str, callback: EventCallback) -> None:
        self.events.off_event(event, callback)

    def metrics_snapshot(self) -> MetricsSnapshot:
        return self.metrics.snapshot(self.env.now, len(self.dispatcher.pending_calls))

    def snapshot(self) -> dict:
        state = self.dispatcher.snapshot()
        state["time"] = self.env.now
        state["scheduler"] = self.scheduler_name
        return state

    def _delayed_call(self, delay: float, floor: int):
        yield self.env.timeout(delay)
        self.request_floor(floor)
