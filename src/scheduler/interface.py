from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class ElevatorSnapshot:
    """Lightweight view of an elevator for scheduling decisions."""

    elevator_id: int
    position: float
    direction: Optional[Direction]
    pending: int

    @property
    def is_idle(self) -> bool:
        return self.direction is None


@dataclass(frozen=True)
class HallCall:
    """A request for a car to visit ``floor``, optionally travelling ``direction``."""

    floor: int
    direction: Optional[Direction] = None


class Scheduler(Protocol):
    """Strategy interface for choosing which car answers a hall call."""

    def select_elevator(
        self,
        elevators: Sequence[ElevatorSnapshot],
        call: HallCall,
    ) -> Optional[int]:
        """
        Return the id of the elevator that should serve ``call``.

        Implementations must not mutate anything; returning None leaves the
        call unanswered so the caller can retry it on a later tick.
        """
        ...
