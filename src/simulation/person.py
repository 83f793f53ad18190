from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class Person:
    """A rider waiting on a floor or travelling in a car.

    ``created_at`` is in simulated seconds. Only ``destination`` is rebound,
    and only while the person is still waiting on a floor.
    """

    destination: int
    created_at: float = 0.0

    def time_since_created(self, now: float) -> float:
        return now - self.created_at
