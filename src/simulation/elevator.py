from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from scheduler import Direction, ElevatorSnapshot

from .config import PARAMETER_BOUNDS
from .destinations import DestinationQueue
from .errors import InvariantViolation
from .person import Person

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = PARAMETER_BOUNDS["update_frequency"].default / 1000


class ElevatorStatus(str, Enum):
    STOPPED = "stopped"  # doors closed, no destination selected
    UP = "up"
    DOWN = "down"
    WAITING = "waiting"  # doors open until the wait deadline


@dataclass
class Elevator:
    """A car moving continuously between floors, one tick at a time.

    Speed and acceleration are kept in floors per tick so each tick is a
    single addition; ``calibrate`` converts the simulated-time rates in
    ``base_acceleration`` (floors/s²) and ``base_min_speed`` (floors/s)
    whenever the tick period or time scale changes. ``wait_time`` is the
    simulated boarding window in ms and ``wait_deadline`` is on the real-time
    clock the simulation advances every tick.
    """

    elevator_id: int
    capacity: int = 12
    base_acceleration: float = 1.0
    base_min_speed: float = 0.1
    wait_time: float = 3000.0
    position: float = 0.0
    rng: random.Random = field(default_factory=random.Random, repr=False)
    speed: float = 0.0
    status: ElevatorStatus = ElevatorStatus.STOPPED
    destination: Optional[int] = None
    halfway_point: float = 0.0
    wait_deadline: Optional[float] = None
    occupants: List[Person] = field(default_factory=list)
    destinations: DestinationQueue = field(default_factory=DestinationQueue)
    acceleration: float = field(init=False, default=0.0)
    min_speed: float = field(init=False, default=0.0)
    _tick_seconds: float = field(init=False, default=DEFAULT_TICK_SECONDS)
    _time_scale: float = field(init=False, default=1.0)
    _departure: float = field(init=False, default=0.0)
    _current_floor: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self._current_floor = int(self.position)
        self.calibrate(self._tick_seconds, self._time_scale)

    # -- read accessors -------------------------------------------------

    @property
    def current_floor(self) -> int:
        return self._current_floor

    @property
    def direction(self) -> Optional[Direction]:
        """Travel direction; while the doors are open, the way the next stop lies."""
        status = self.status
        if status is ElevatorStatus.WAITING:
            if not self.destinations:
                return None
            if self.destinations.peek_min() > self.position:
                return Direction.UP
            return Direction.DOWN
        if status is ElevatorStatus.STOPPED:
            return None
        if status is ElevatorStatus.UP:
            return Direction.UP
        if status is ElevatorStatus.DOWN:
            return Direction.DOWN
        raise InvariantViolation(f"Unknown elevator status {status!r}")

    @property
    def is_idle(self) -> bool:
        return self.direction is None

    @property
    def destination_count(self) -> int:
        return len(self.destinations)

    @property
    def speed_floors_per_second(self) -> float:
        """Current speed in floors per real second."""
        return self.speed / self._tick_seconds

    def is_full(self) -> bool:
        return len(self.occupants) >= self.capacity

    def to_snapshot(self) -> ElevatorSnapshot:
        return ElevatorSnapshot(
            elevator_id=self.elevator_id,
            position=self.position,
            direction=self.direction,
            pending=len(self.destinations),
        )

    # -- commands -------------------------------------------------------

    def go_to(self, floor: int) -> bool:
        """Queue ``floor`` as a stop. Returns False if it is already planned or open."""
        status = self.status
        moving = status is ElevatorStatus.UP or status is ElevatorStatus.DOWN
        if moving and floor == self.destination:
            return False
        if status is ElevatorStatus.WAITING and floor == self._current_floor:
            # Doors are already open here.
            return False
        return self.destinations.add(floor)

    def add_occupant(self, person: Person) -> None:
        if self.is_full():
            raise InvariantViolation(
                f"Elevator {self.elevator_id} is full ({self.capacity} occupants)"
            )
        self.occupants.append(person)
        self.go_to(person.destination)

    def unload(self) -> List[Person]:
        """Let out everyone whose destination is the current floor."""
        alighted = [p for p in self.occupants if p.destination == self._current_floor]
        if alighted:
            self.occupants = [p for p in self.occupants if p.destination != self._current_floor]
        return alighted

    def calibrate(self, tick_seconds: float, time_scale: float) -> None:
        """Derive per-tick rates so floors per simulated second stay fixed."""
        previous_step = self._tick_seconds * self._time_scale
        step = tick_seconds * time_scale
        self.acceleration = self.base_acceleration * step * step
        self.min_speed = self.base_min_speed * step
        if previous_step > 0:
            self.speed *= step / previous_step
        self._tick_seconds = tick_seconds
        self._time_scale = time_scale

    def rescale_deadline(self, now: float, ratio: float) -> None:
        """Shrink the remaining wait by ``ratio`` (new time scale / old time scale)."""
        if self.wait_deadline is None:
            return
        remaining = max(0.0, self.wait_deadline - now)
        self.wait_deadline = now + remaining / ratio

    # -- tick -----------------------------------------------------------

    def update(self, now: float) -> List[Person]:
        """Advance one tick at real time ``now`` (ms). Returns who got out."""
        status = self.status
        if status is ElevatorStatus.WAITING:
            alighted = self.unload()
            if self.wait_deadline is not None and now < self.wait_deadline:
                return alighted
            self.status = ElevatorStatus.STOPPED
            self.wait_deadline = None
            logger.debug("Elevator %s closed doors at floor %s", self.elevator_id, self._current_floor)
            if self.destinations:
                self._depart(now)
            return alighted
        if status is ElevatorStatus.STOPPED:
            if self.destinations:
                self._depart(now)
            return []
        if status is ElevatorStatus.UP or status is ElevatorStatus.DOWN:
            self._retarget()
            self._advance(now)
            return []
        raise InvariantViolation(f"Unknown elevator status {status!r}")

    def pull_next_destination(self, now: float) -> int:
        """Pick the next stop from a standstill and set the matching status."""
        if self.status is not ElevatorStatus.STOPPED:
            raise InvariantViolation(
                f"Elevator {self.elevator_id} pulled a destination while {self.status.value}"
            )
        queue = self.destinations
        if not queue:
            raise InvariantViolation(f"Elevator {self.elevator_id} has no destination queued")
        lowest = queue.peek_min()
        highest = queue.peek_max()
        if lowest > self.position:
            self.status = ElevatorStatus.UP
            return queue.pop_min()
        if highest < self.position:
            self.status = ElevatorStatus.DOWN
            return queue.pop_max()
        if lowest < self.position < highest:
            if self.rng.random() < 0.5:
                self.status = ElevatorStatus.DOWN
                return queue.pop_min()
            self.status = ElevatorStatus.UP
            return queue.pop_max()
        if lowest == self.position:
            self._open_doors(now)
            return queue.pop_min()
        if highest == self.position:
            self._open_doors(now)
            return queue.pop_max()
        raise InvariantViolation(
            f"Elevator {self.elevator_id} found no next destination "
            f"from position {self.position} with queue {list(queue)}"
        )

    def _depart(self, now: float) -> None:
        self.destination = self.pull_next_destination(now)
        self._departure = self.position
        self.halfway_point = (self.destination + self.position) / 2
        logger.debug(
            "Elevator %s heading %s from %s to %s",
            self.elevator_id,
            self.status.value,
            self.position,
            self.destination,
        )

    def _retarget(self) -> None:
        # Serve queued floors that lie on the way to the current destination.
        if self.destination is None or not self.destinations:
            return
        if self.status is ElevatorStatus.UP:
            on_the_way = [f for f in self.destinations if self.position < f < self.destination]
            nearest = min(on_the_way) if on_the_way else None
        else:
            on_the_way = [f for f in self.destinations if self.destination < f < self.position]
            nearest = max(on_the_way) if on_the_way else None
        if nearest is None:
            return
        self.destinations.remove(nearest)
        self.destinations.add(self.destination)
        logger.debug(
            "Elevator %s retargeted from %s to %s", self.elevator_id, self.destination, nearest
        )
        self.destination = nearest
        self.halfway_point = (self._departure + nearest) / 2

    def _advance(self, now: float) -> None:
        going_up = self.status is ElevatorStatus.UP
        before_halfway = (
            self.position < self.halfway_point if going_up else self.position > self.halfway_point
        )
        if before_halfway:
            self.speed += self.acceleration
        elif self.speed - self.acceleration > self.min_speed:
            self.speed -= self.acceleration

        if going_up:
            self.position += self.speed
            self._current_floor = math.floor(self.position)
            arrived = self.position >= self.destination
        else:
            self.position -= self.speed
            self._current_floor = math.ceil(self.position)
            arrived = self.position <= self.destination
        if arrived:
            self._arrive(now)

    def _arrive(self, now: float) -> None:
        self.position = float(self.destination)
        self._current_floor = self.destination
        self.speed = 0.0
        self._open_doors(now)
        logger.debug("Elevator %s arrived at floor %s", self.elevator_id, self.destination)

    def _open_doors(self, now: float) -> None:
        self.status = ElevatorStatus.WAITING
        self.wait_deadline = now + self.wait_time / self._time_scale
