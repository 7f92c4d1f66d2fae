from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class PendingCall:
    """A floor call from the moment it is requested until a car arrives."""

    call_id: int
    floor: int
    requested_at: float
    assigned_at: Optional[float] = None
    elevator_id: Optional[int] = None
    served_at: Optional[float] = None

    def record_assignment(self, elevator_id: int, time: float) -> None:
        self.elevator_id = elevator_id
        self.assigned_at = time

    def record_service(self, time: float) -> None:
        self.served_at = time

    @property
    def wait_time(self) -> Optional[float]:
        if self.served_at is None:
            return None
        return self.served_at - self.requested_at
