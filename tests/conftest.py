"""
Shared pytest fixtures for the elevator bank tests.
"""

import random

import pytest

from simulation import Building, Elevator


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_elevator(rng):
    """Factory for cars that default to the shared seeded random source."""

    def _make(elevator_id: int = 0, **kwargs) -> Elevator:
        kwargs.setdefault("rng", rng)
        return Elevator(elevator_id, **kwargs)

    return _make


@pytest.fixture
def make_building(make_elevator):
    """Factory for a building with idle cars parked at ``positions``."""

    def _make(positions=(0.0,), num_floors: int = 10, **elevator_kwargs) -> Building:
        elevators = [
            make_elevator(i, position=float(p), **elevator_kwargs) for i, p in enumerate(positions)
        ]
        return Building(num_floors=num_floors, elevators=elevators)

    return _make


def run_until(elevator: Elevator, predicate, now: float = 0.0, period: float = 20.0, limit: int = 20000) -> float:
    """Tick ``elevator`` until ``predicate(elevator)`` holds; returns the clock."""
    for _ in range(limit):
        if predicate(elevator):
            return now
        elevator.update(now)
        now += period
    raise AssertionError("condition never reached")


@pytest.fixture
def tick_until():
    return run_until


@pytest.fixture
def fixed_random():
    return FixedRandom
