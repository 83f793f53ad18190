from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from .errors import ConfigurationError


@dataclass
class ElevatorConstraints:
    """Physical constraints shared by every car, in simulated units."""

    capacity: int = 12
    acceleration: float = 1.0  # floors per second squared
    min_speed: float = 0.1  # floors per second


@dataclass(frozen=True)
class ParameterBounds:
    minimum: float
    maximum: float
    default: float

    def clamp(self, value: float) -> float:
        return min(self.maximum, max(self.minimum, value))

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


MAX_TIME_SCALE_FACTOR = 5

# update_frequency is the real-time tick period in ms, spawn_interval and
# loading_wait_time are simulated ms, time_scale is simulated s per real s.
PARAMETER_BOUNDS: Dict[str, ParameterBounds] = {
    "update_frequency": ParameterBounds(1, 500, 20),
    "spawn_interval": ParameterBounds(-1, 500, 100),
    "spawn_probability": ParameterBounds(0.0, 0.99, 0.05),
    "group_member_probability": ParameterBounds(0.0, 0.99, 0.5),
    "loading_wait_time": ParameterBounds(0, 30000, 3000),
    "time_scale": ParameterBounds(
        2.0 ** -MAX_TIME_SCALE_FACTOR, 2.0 ** MAX_TIME_SCALE_FACTOR, 1.0
    ),
}


def get_bounds(name: str) -> ParameterBounds:
    bounds = PARAMETER_BOUNDS.get(name)
    if bounds is None:
        raise ConfigurationError(
            f"Unknown parameter '{name}'. Available: {', '.join(PARAMETER_BOUNDS)}"
        )
    return bounds


def coerce_number(name: str, value: object) -> float:
    """Return ``value`` as a finite float or refuse it."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    number = float(value)
    if math.isnan(number):
        raise ConfigurationError(f"{name} must not be NaN")
    return number


@dataclass
class SimulationSettings:
    """Construction-time shape of the building plus the adjustable parameters."""

    num_floors: int = 10
    num_elevators: int = 4
    random_seed: Optional[int] = None
    elevator: ElevatorConstraints = field(default_factory=ElevatorConstraints)
    update_frequency: float = PARAMETER_BOUNDS["update_frequency"].default
    spawn_interval: float = PARAMETER_BOUNDS["spawn_interval"].default
    spawn_probability: float = PARAMETER_BOUNDS["spawn_probability"].default
    group_member_probability: float = PARAMETER_BOUNDS["group_member_probability"].default
    loading_wait_time: float = PARAMETER_BOUNDS["loading_wait_time"].default
    time_scale: float = PARAMETER_BOUNDS["time_scale"].default

    def validate(self) -> None:
        if self.num_floors < 2:
            raise ConfigurationError("Building must have at least two floors")
        if self.num_elevators < 1:
            raise ConfigurationError("Simulation requires at least one elevator")
        if self.elevator.capacity < 1:
            raise ConfigurationError("Elevator capacity must be at least one")
        if self.elevator.acceleration <= 0:
            raise ConfigurationError("Elevator acceleration must be positive")
        if self.elevator.min_speed < 0:
            raise ConfigurationError("Elevator minimum speed must not be negative")
        for name, bounds in PARAMETER_BOUNDS.items():
            value = coerce_number(name, getattr(self, name))
            if not bounds.contains(value):
                raise ConfigurationError(
                    f"{name} must be in [{bounds.minimum}, {bounds.maximum}], got {value}"
                )

    def value(self, name: str) -> float:
        get_bounds(name)
        return getattr(self, name)

    @classmethod
    def from_dict(cls, data: Dict) -> "SimulationSettings":
        building_cfg = data.get("building", {})
        parameters = data.get("parameters", {})
        unknown = set(parameters) - set(PARAMETER_BOUNDS)
        if unknown:
            raise ConfigurationError(f"Unknown parameters: {', '.join(sorted(unknown))}")
        settings = cls(
            num_floors=building_cfg.get("num_floors", 10),
            num_elevators=building_cfg.get("elevator_count", 4),
            random_seed=data.get("random_seed"),
            elevator=ElevatorConstraints(**building_cfg.get("constraints", {})),
            **parameters,
        )
        settings.validate()
        return settings
