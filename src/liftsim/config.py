from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidConfiguration


@dataclass(frozen=True)
class ElevatorTiming:
    """Fixed timing constants shared by every car, in simulation time units."""

    time_per_floor: float = 3.0
    dwell_time: float = 2.0

    def __post_init__(self) -> None:
        for name in ("time_per_floor", "dwell_time"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise InvalidConfiguration(f"{name} must be a positive finite number, got {value}")

    def travel_time(self, distance: int) -> float:
        return distance * self.time_per_floor
