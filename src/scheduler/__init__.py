from __future__ import annotations

from typing import Dict, Type

from .interface import Direction, ElevatorSnapshot, HallCall, Scheduler
from .nearest import NearestCarScheduler

__all__ = [
    "Direction",
    "ElevatorSnapshot",
    "HallCall",
    "NearestCarScheduler",
    "Scheduler",
    "get_scheduler",
]


SCHEDULER_REGISTRY: Dict[str, Type[Scheduler]] = {
    "nearest_car": NearestCarScheduler,
}


def get_scheduler(name: str, **kwargs) -> Scheduler:
    """Build the scheduler registered under ``name`` (case-insensitive)."""
    try:
        scheduler_cls = SCHEDULER_REGISTRY[name.lower()]
    except KeyError:
        known = ", ".join(sorted(SCHEDULER_REGISTRY))
        raise ValueError(f"Unknown scheduler '{name}'; registered: {known}") from None
    return scheduler_cls(**kwargs)
