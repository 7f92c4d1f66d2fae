from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple


@dataclass(frozen=True)
class ElevatorSnapshot:
    """Lightweight view of an elevator for assignment decisions."""

    elevator_id: int
    current_floor: int
    state: str
    target_floor: Optional[int]
    destinations: Tuple[int, ...]

    @property
    def is_idle(self) -> bool:
        return self.state == "idle"


class Scheduler(Protocol):
    """Strategy interface for choosing which elevator serves a call."""

    def select_elevator(
        self,
        elevator_state: Iterable[ElevatorSnapshot],
        floor: int,
    ) -> Optional[int]:
        """
        Return the id of the elevator that should serve ``floor``.

        Returning ``None`` leaves the call pending until the dispatcher
        retries, typically when an elevator becomes free.
        """
        ...
