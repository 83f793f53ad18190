from __future__ import annotations

from bisect import bisect_left
from typing import Iterator, List


class DestinationQueue:
    """Ascending, duplicate-free set of floors a single car still has to visit."""

    def __init__(self) -> None:
        self._floors: List[int] = []

    def add(self, floor: int) -> bool:
        """Insert ``floor`` in order. Returns False if it was already queued."""
        index = bisect_left(self._floors, floor)
        if index < len(self._floors) and self._floors[index] == floor:
            return False
        self._floors.insert(index, floor)
        return True

    def remove(self, floor: int) -> None:
        index = bisect_left(self._floors, floor)
        if index == len(self._floors) or self._floors[index] != floor:
            raise KeyError(floor)
        del self._floors[index]

    def peek_min(self) -> int:
        if not self._floors:
            raise IndexError("peek from an empty destination queue")
        return self._floors[0]

    def peek_max(self) -> int:
        if not self._floors:
            raise IndexError("peek from an empty destination queue")
        return self._floors[-1]

    def pop_min(self) -> int:
        if not self._floors:
            raise IndexError("pop from an empty destination queue")
        return self._floors.pop(0)

    def pop_max(self) -> int:
        if not self._floors:
            raise IndexError("pop from an empty destination queue")
        return self._floors.pop()

    def __contains__(self, floor: object) -> bool:
        return floor in self._floors

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._floors))

    def __len__(self) -> int:
        return len(self._floors)

    def __bool__(self) -> bool:
        return bool(self._floors)

    def __repr__(self) -> str:
        return f"DestinationQueue({self._floors!r})"
