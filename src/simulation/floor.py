from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from scheduler import Direction

from .person import Person


def travel_direction(origin: int, destination: int) -> Direction:
    return Direction.UP if destination > origin else Direction.DOWN


@dataclass
class Floor:
    """A floor with its waiting riders in arrival order."""

    number: int
    waiting: List[Person] = field(default_factory=list)

    def add_person(self, person: Person) -> None:
        self.waiting.append(person)

    def remove_person(self, person: Person) -> None:
        self.waiting.remove(person)

    def has_waiting(self, direction: Optional[Direction] = None) -> bool:
        if direction is None:
            return bool(self.waiting)
        return any(travel_direction(self.number, p.destination) is direction for p in self.waiting)

    def directions_waiting(self) -> List[Direction]:
        return [d for d in (Direction.UP, Direction.DOWN) if self.has_waiting(d)]

    def __iter__(self) -> Iterator[Person]:
        return iter(list(self.waiting))

    def __len__(self) -> int:
        return len(self.waiting)
