from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from scheduler import Direction, ElevatorSnapshot, HallCall, Scheduler, get_scheduler

from .elevator import Elevator, ElevatorStatus
from .errors import ConfigurationError, InvariantViolation
from .floor import Floor, travel_direction
from .person import Person

logger = logging.getLogger(__name__)


@dataclass
class Building:
    """Floors, cars and the scheduler that pairs hall calls with cars."""

    num_floors: int
    elevators: List[Elevator] = field(default_factory=list)
    scheduler_name: str = "nearest_car"
    scheduler_options: dict = field(default_factory=dict)
    scheduler: Scheduler = field(init=False)
    floors: List[Floor] = field(init=False)
    pending_calls: Dict[HallCall, None] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.floors = [Floor(i) for i in range(self.num_floors)]
        self.scheduler = get_scheduler(self.scheduler_name, **self.scheduler_options)

    def get_floor(self, floor_number: int) -> Optional[Floor]:
        if 0 <= floor_number < self.num_floors:
            return self.floors[floor_number]
        return None

    def people_on_floor(self, floor_number: int) -> Tuple[Person, ...]:
        return tuple(self._require_floor(floor_number).waiting)

    def count_on_floor(self, floor_number: int) -> int:
        return len(self._require_floor(floor_number))

    def add_person(self, floor_number: int, person: Person) -> None:
        self._require_floor(floor_number).add_person(person)

    def set_scheduler(self, name: str, **options) -> None:
        self.scheduler_name = name
        self.scheduler_options = options
        self.scheduler = get_scheduler(name, **options)

    def request_elevator(
        self, floor_number: int, direction: Optional[Direction] = None
    ) -> Optional[Elevator]:
        """Ask the scheduler for a car and queue the floor on it.

        A directed call nobody can take is kept and retried by
        ``retry_pending_calls``.
        """
        self._require_floor(floor_number)
        call = HallCall(floor=floor_number, direction=direction)
        elevator_id = self.scheduler.select_elevator(self._snapshot_elevators(), call)
        elevator = self._get_elevator(elevator_id) if elevator_id is not None else None
        if elevator is None:
            if direction is not None:
                self.pending_calls[call] = None
            logger.debug("Hall call at floor %s (%s) left pending", floor_number, direction)
            return None
        self.pending_calls.pop(call, None)
        elevator.go_to(floor_number)
        return elevator

    def retry_pending_calls(self) -> None:
        for call in list(self.pending_calls):
            del self.pending_calls[call]
            floor = self.floors[call.floor]
            if not floor.has_waiting(call.direction):
                continue
            self.request_elevator(call.floor, call.direction)

    def load(self, elevator: Elevator) -> List[Person]:
        """Move eligible riders from the car's floor into the car, in arrival order."""
        floor = self.get_floor(elevator.current_floor)
        if floor is None:
            return []
        boarded: List[Person] = []
        for person in floor:
            if elevator.is_full():
                break
            if self._can_board(elevator, floor.number, person):
                floor.remove_person(person)
                elevator.add_occupant(person)
                boarded.append(person)
        if floor.waiting and elevator.status in (ElevatorStatus.UP, ElevatorStatus.DOWN):
            # Car is pulling away; riders it left behind need another one.
            for direction in floor.directions_waiting():
                self.pending_calls[HallCall(floor=floor.number, direction=direction)] = None
        return boarded

    def snapshot(self) -> dict:
        return {
            "floors": [len(floor) for floor in self.floors],
            "pending_calls": [
                {"floor": call.floor, "direction": call.direction.value if call.direction else None}
                for call in self.pending_calls
            ],
            "elevators": [
                {
                    "id": elevator.elevator_id,
                    "position": elevator.position,
                    "speed": elevator.speed_floors_per_second,
                    "status": elevator.status.value,
                    "direction": elevator.direction.value if elevator.direction else None,
                    "destination": elevator.destination,
                    "targets": list(elevator.destinations),
                    "passenger_count": len(elevator.occupants),
                }
                for elevator in self.elevators
            ],
        }

    def _can_board(self, elevator: Elevator, floor_number: int, person: Person) -> bool:
        direction = elevator.direction
        if direction is None:
            return True
        if direction is Direction.UP:
            return person.destination > floor_number
        if direction is Direction.DOWN:
            return person.destination < floor_number
        raise InvariantViolation(f"Unknown direction {direction!r}")

    def _snapshot_elevators(self) -> List[ElevatorSnapshot]:
        return [elevator.to_snapshot() for elevator in self.elevators]

    def _require_floor(self, floor_number: int) -> Floor:
        floor = self.get_floor(floor_number)
        if floor is None:
            raise ConfigurationError(
                f"Floor {floor_number} is outside the building (0-{self.num_floors - 1})"
            )
        return floor

    def _get_elevator(self, elevator_id: int) -> Optional[Elevator]:
        for elevator in self.elevators:
            if elevator.elevator_id == elevator_id:
                return elevator
        return None
