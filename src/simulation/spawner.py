from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from .config import PARAMETER_BOUNDS
from .floor import travel_direction
from .person import Person

if TYPE_CHECKING:
    from .building import Building

logger = logging.getLogger(__name__)

LOBBY = 0


@dataclass
class Spawner:
    """Creates groups of riders that either leave from or head to the lobby.

    ``spawn_interval`` is in simulated ms; an interval of zero or less
    disables spawning. ``next_spawn_at`` is on the
    real-time clock, like the elevators' wait deadlines.
    """

    rng: random.Random
    spawn_probability: float = PARAMETER_BOUNDS["spawn_probability"].default
    group_member_probability: float = PARAMETER_BOUNDS["group_member_probability"].default
    spawn_interval: float = PARAMETER_BOUNDS["spawn_interval"].default
    spawned_count: int = 0
    next_spawn_at: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self.spawn_interval > 0

    def set_interval(self, interval: float, now: float, time_scale: float) -> None:
        self.spawn_interval = interval
        self.next_spawn_at = now + interval / time_scale if self.enabled else None

    def rescale_deadline(self, now: float, ratio: float) -> None:
        if self.next_spawn_at is None:
            return
        remaining = max(0.0, self.next_spawn_at - now)
        self.next_spawn_at = now + remaining / ratio

    def tick(self, now: float, time_scale: float, building: "Building", sim_time: float) -> List[Person]:
        """Spawn if the interval has elapsed at real time ``now`` (ms)."""
        if not self.enabled:
            return []
        if self.next_spawn_at is None:
            self.next_spawn_at = now + self.spawn_interval / time_scale
        if now < self.next_spawn_at:
            return []
        self.next_spawn_at = now + self.spawn_interval / time_scale
        return self.spawn(building, sim_time)

    def spawn(self, building: "Building", sim_time: float) -> List[Person]:
        spawned: List[Person] = []
        while self.rng.random() < self.spawn_probability:
            spawned.extend(self.spawn_group(building, sim_time))
        return spawned

    def spawn_group(self, building: "Building", sim_time: float) -> List[Person]:
        """Add one group at its origin floor and place a single hall call for it."""
        upper_floors = building.num_floors - 1
        origin = LOBBY
        if self.rng.random() < 0.5:
            origin = self.rng.randrange(upper_floors) + 1
        destination = LOBBY
        if origin == LOBBY:
            destination = self.rng.randrange(upper_floors) + 1

        group: List[Person] = []
        while True:
            person = Person(destination=destination, created_at=sim_time)
            building.add_person(origin, person)
            group.append(person)
            self.spawned_count += 1
            if self.rng.random() >= self.group_member_probability:
                break

        logger.debug(
            "Spawned %s rider(s) at floor %s heading to %s", len(group), origin, destination
        )
        building.request_elevator(origin, travel_direction(origin, destination))
        return group
