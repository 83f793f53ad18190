"""Simulation primitives for the elevator bank."""

from .building import Building
from .config import (
    PARAMETER_BOUNDS,
    ElevatorConstraints,
    ParameterBounds,
    SimulationSettings,
)
from .destinations import DestinationQueue
from .elevator import Elevator, ElevatorStatus
from .errors import ConfigurationError, InvariantViolation
from .floor import Floor
from .person import Person
from .simulation import MetricsSnapshot, Simulation
from .spawner import Spawner

__all__ = [
    "Building",
    "ConfigurationError",
    "DestinationQueue",
    "Elevator",
    "ElevatorConstraints",
    "ElevatorStatus",
    "Floor",
    "InvariantViolation",
    "MetricsSnapshot",
    "PARAMETER_BOUNDS",
    "ParameterBounds",
    "Person",
    "Simulation",
    "SimulationSettings",
    "Spawner",
]
