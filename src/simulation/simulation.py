from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from scheduler import Direction

from .building import Building
from .config import ParameterBounds, SimulationSettings, coerce_number, get_bounds
from .elevator import Elevator
from .errors import InvariantViolation
from .person import Person
from .spawner import Spawner

logger = logging.getLogger(__name__)


@dataclass
class MetricsSnapshot:
    time_step: int
    average_wait: float
    wait_p95: float
    average_ride: float
    ride_p95: float
    throughput: int
    spawned: int


class MetricsTracker:
    """Wait and ride times in simulated seconds."""

    def __init__(self) -> None:
        self.wait_times: List[float] = []
        self.ride_times: List[float] = []
        self.throughput: int = 0
        self._boarded_at: Dict[Person, float] = {}

    def record_boarding(self, person: Person, now: float) -> None:
        self._boarded_at[person] = now
        self.wait_times.append(person.time_since_created(now))

    def record_alighting(self, person: Person, now: float) -> None:
        boarded_at = self._boarded_at.pop(person, None)
        if boarded_at is not None:
            self.ride_times.append(now - boarded_at)
        self.throughput += 1

    def average_wait(self) -> float:
        return self._average(self.wait_times)

    def _average(self, values: List[float]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    def _percentile(self, values: List[float], percentile: float) -> float:
        if not values:
            return 0.0
        ordered = sorted(values)
        rank = (len(ordered) - 1) * percentile
        lower, upper = math.floor(rank), math.ceil(rank)
        if lower == upper:
            return float(ordered[lower])
        # Linear interpolation between the two closest ranks.
        return float(ordered[lower] * (upper - rank) + ordered[upper] * (rank - lower))

    def snapshot(self, time_step: int, spawned: int = 0) -> MetricsSnapshot:
        return MetricsSnapshot(
            time_step=time_step,
            average_wait=self._average(self.wait_times),
            wait_p95=self._percentile(self.wait_times, 0.95),
            average_ride=self._average(self.ride_times),
            ride_p95=self._percentile(self.ride_times, 0.95),
            throughput=self.throughput,
            spawned=spawned,
        )


class Simulation:
    """Fixed-tick elevator bank: motion, then loading, then arrivals.

    Time is kept on two clocks. ``elapsed_ms`` advances by the tick period
    (real ms) and carries every deadline; ``sim_time`` advances by the tick
    period times the time scale (simulated seconds) and stamps riders.
    """

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        scheduler_name: str = "nearest_car",
        rng: Optional[random.Random] = None,
        metrics_hook_interval: int = 1,
    ) -> None:
        self.settings = settings or SimulationSettings()
        self.settings.validate()
        self.random = rng or random.Random(self.settings.random_seed)
        constraints = self.settings.elevator
        elevators = [
            Elevator(
                elevator_id=i,
                capacity=constraints.capacity,
                base_acceleration=constraints.acceleration,
                base_min_speed=constraints.min_speed,
                wait_time=self.settings.loading_wait_time,
                rng=self.random,
            )
            for i in range(self.settings.num_elevators)
        ]
        for elevator in elevators:
            elevator.calibrate(self.tick_seconds, self.settings.time_scale)
        self.building = Building(
            num_floors=self.settings.num_floors,
            elevators=elevators,
            scheduler_name=scheduler_name,
        )
        self.spawner = Spawner(
            rng=self.random,
            spawn_probability=self.settings.spawn_probability,
            group_member_probability=self.settings.group_member_probability,
        )
        self.spawner.set_interval(self.settings.spawn_interval, 0.0, self.settings.time_scale)
        self.tick: int = 0
        self.elapsed_ms: float = 0.0
        self.sim_time: float = 0.0
        self.metrics = MetricsTracker()
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self.metrics_hook_interval = max(1, metrics_hook_interval)

    # -- clock ----------------------------------------------------------

    @property
    def tick_seconds(self) -> float:
        return self.settings.update_frequency / 1000

    @property
    def elevators(self) -> List[Elevator]:
        return self.building.elevators

    def run(self, ticks: int) -> None:
        for _ in range(ticks):
            self.step()

    def step(self) -> None:
        now = self.elapsed_ms

        for elevator in self.elevators:
            for person in elevator.update(now):
                self.metrics.record_alighting(person, self.sim_time)

        for elevator in self.elevators:
            if elevator.speed == 0:
                for person in self.building.load(elevator):
                    self.metrics.record_boarding(person, self.sim_time)
            if len(elevator.occupants) > elevator.capacity:
                raise InvariantViolation(
                    f"Elevator {elevator.elevator_id} holds {len(elevator.occupants)} "
                    f"riders, capacity {elevator.capacity}"
                )

        self.building.retry_pending_calls()
        arrivals = self.spawner.tick(now, self.settings.time_scale, self.building, self.sim_time)
        if arrivals:
            self._emit("arrival", {"time": self.sim_time, "count": len(arrivals)})

        if self.tick % self.metrics_hook_interval == 0:
            self._emit_metrics()

        self.tick += 1
        self.elapsed_ms += self.settings.update_frequency
        self.sim_time += self.tick_seconds * self.settings.time_scale

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    # -- write entry points ---------------------------------------------

    def request_elevator(self, floor: int, direction: Optional[Direction] = None) -> Optional[Elevator]:
        return self.building.request_elevator(floor, direction)

    def adjust(self, name: str, value: object) -> float:
        """Set any bounded parameter by name. Returns the value applied."""
        get_bounds(name)
        setter = getattr(self, f"set_{name}")
        return setter(value)

    def set_update_frequency(self, value: object) -> float:
        period = self._bounded("update_frequency", value)
        self.settings.update_frequency = period
        for elevator in self.elevators:
            elevator.calibrate(self.tick_seconds, self.settings.time_scale)
        logger.info("Tick period set to %s ms", period)
        return period

    def set_time_scale(self, value: object) -> float:
        scale = self._bounded("time_scale", value)
        ratio = scale / self.settings.time_scale
        self.settings.time_scale = scale
        for elevator in self.elevators:
            elevator.calibrate(self.tick_seconds, scale)
            elevator.rescale_deadline(self.elapsed_ms, ratio)
        self.spawner.rescale_deadline(self.elapsed_ms, ratio)
        logger.info("Time scale set to %s", scale)
        return scale

    def set_spawn_interval(self, value: object) -> float:
        interval = self._bounded("spawn_interval", value)
        self.settings.spawn_interval = interval
        self.spawner.set_interval(interval, self.elapsed_ms, self.settings.time_scale)
        logger.info("Spawn interval set to %s ms", interval)
        return interval

    def set_spawn_probability(self, value: object) -> float:
        probability = self._bounded("spawn_probability", value)
        self.settings.spawn_probability = probability
        self.spawner.spawn_probability = probability
        logger.info("Spawn probability set to %s", probability)
        return probability

    def set_group_member_probability(self, value: object) -> float:
        probability = self._bounded("group_member_probability", value)
        self.settings.group_member_probability = probability
        self.spawner.group_member_probability = probability
        logger.info("Group member probability set to %s", probability)
        return probability

    def set_loading_wait_time(self, value: object) -> float:
        wait = self._bounded("loading_wait_time", value)
        self.settings.loading_wait_time = wait
        for elevator in self.elevators:
            elevator.wait_time = wait
        logger.info("Loading wait time set to %s ms", wait)
        return wait

    # -- read accessors -------------------------------------------------

    def bounds(self, name: str) -> ParameterBounds:
        return get_bounds(name)

    def value(self, name: str) -> float:
        return self.settings.value(name)

    @property
    def spawned_count(self) -> int:
        return self.spawner.spawned_count

    @property
    def average_wait_time(self) -> float:
        return self.metrics.average_wait()

    def snapshot(self) -> dict:
        return {
            "tick": self.tick,
            "elapsed_ms": self.elapsed_ms,
            "sim_time": self.sim_time,
            "building": self.building.snapshot(),
            "spawned": self.spawned_count,
        }

    # -- internals ------------------------------------------------------

    def _bounded(self, name: str, value: object) -> float:
        bounds = get_bounds(name)
        number = coerce_number(name, value)
        clamped = bounds.clamp(number)
        if clamped != number:
            logger.warning(
                "%s=%s outside [%s, %s]; clamped to %s",
                name,
                number,
                bounds.minimum,
                bounds.maximum,
                clamped,
            )
        return clamped

    def _emit_metrics(self) -> None:
        if not self.event_hooks.get("metrics"):
            return
        snapshot = self.metrics.snapshot(self.tick, self.spawned_count)
        self._emit("metrics", {"metrics": snapshot, "building": self.building.snapshot()})

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
