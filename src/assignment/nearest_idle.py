from __future__ import annotations

from typing import Iterable, Optional

from .interface import ElevatorSnapshot


class NearestIdleScheduler:
    """Sends the closest idle elevator; busy elevators are never considered.

    The scan keeps the first elevator reaching the current minimum distance
    and only replaces it on a strictly smaller one, so ties go to whichever
    elevator comes first in fleet order (the lowest id).
    """

    def select_elevator(
        self,
        elevator_state: Iterable[ElevatorSnapshot],
        floor: int,
    ) -> Optional[int]:
        closest: Optional[ElevatorSnapshot] = None
        min_distance = float("inf")
        for elevator in elevator_state:
            if not elevator.is_idle:
                continue
            distance = abs(elevator.current_floor - floor)
            if distance < min_distance:
                min_distance = distance
                closest = elevator
        return closest.elevator_id if closest is not None else None
