from __future__ import annotations

import logging
from typing import Optional, Sequence

from .interface import ElevatorSnapshot, HallCall
from .utils import closest_elevator, is_approaching, least_busy_elevator

logger = logging.getLogger(__name__)


class NearestCarScheduler:
    """Sends the nearest idle or approaching car, else the least busy one.

    Idle cars and cars already travelling toward the call floor compete on
    distance alone. A directed call only considers cars moving in the
    requested direction and goes unanswered when there are none; an
    undirected call falls back to the car with the shortest queue.
    """

    def select_elevator(
        self,
        elevators: Sequence[ElevatorSnapshot],
        call: HallCall,
    ) -> Optional[int]:
        candidates = [
            e
            for e in elevators
            if e.is_idle or is_approaching(e, call.floor, call.direction)
        ]
        chosen = closest_elevator(candidates, call.floor)
        if chosen is None and call.direction is None:
            chosen = least_busy_elevator(elevators)
        if chosen is None:
            logger.debug("No car available for floor %s going %s", call.floor, call.direction)
            return None
        logger.debug("Floor %s call assigned to elevator %s", call.floor, chosen.elevator_id)
        return chosen.elevator_id
