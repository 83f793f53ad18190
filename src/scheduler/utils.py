from __future__ import annotations

from typing import Iterable, Optional

from .interface import Direction, ElevatorSnapshot


def distance_to(elevator: ElevatorSnapshot, floor: int) -> float:
    return abs(elevator.position - floor)


def is_approaching(
    elevator: ElevatorSnapshot, floor: int, direction: Optional[Direction] = None
) -> bool:
    """True if the car is travelling toward ``floor``.

    With ``direction`` set, only cars moving that way qualify.
    """

    if elevator.direction is Direction.UP:
        return direction is not Direction.DOWN and elevator.position < floor
    if elevator.direction is Direction.DOWN:
        return direction is not Direction.UP and elevator.position > floor
    return False


def closest_elevator(
    candidates: Iterable[ElevatorSnapshot], floor: int
) -> Optional[ElevatorSnapshot]:
    """Nearest candidate by position. Idle cars win ties, then iteration order."""

    best: Optional[ElevatorSnapshot] = None
    for candidate in candidates:
        if best is None:
            best = candidate
            continue
        gap = distance_to(candidate, floor)
        best_gap = distance_to(best, floor)
        if gap < best_gap or (gap == best_gap and candidate.is_idle and not best.is_idle):
            best = candidate
    return best


def least_busy_elevator(candidates: Iterable[ElevatorSnapshot]) -> Optional[ElevatorSnapshot]:
    """Car with the fewest pending destinations; ties resolve to the first seen."""

    best: Optional[ElevatorSnapshot] = None
    for candidate in candidates:
        if best is None or candidate.pending < best.pending:
            best = candidate
    return best
