from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import asdict
from typing import Optional

from pydantic import BaseModel, Field

from scheduler import Direction
from simulation import PARAMETER_BOUNDS, Simulation, SimulationSettings

logger = logging.getLogger(__name__)


class ParameterAdjustment(BaseModel):
    name: str
    value: float


class ElevatorRequest(BaseModel):
    floor: int = Field(ge=0)
    direction: Optional[Direction] = None


class SimulationManager:
    """Runs a simulation in real time on the asyncio loop.

    Ticks and control calls share one lock, so a view polling
    ``current_state`` never sees a tick half applied.
    """

    def __init__(self, simulation: Optional[Simulation] = None) -> None:
        self.simulation = simulation or Simulation(SimulationSettings())
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def tick_interval(self) -> float:
        return self.simulation.tick_seconds

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.info(
                "Simulation clock started at %s ms per tick",
                self.simulation.settings.update_frequency,
            )

    async def pause(self) -> None:
        """Stop ticking. Re-raises whatever stopped the clock on its own."""
        if self._task:
            task, self._task = self._task, None
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info("Simulation clock paused at tick %s", self.simulation.tick)

    async def _run(self) -> None:
        while True:
            async with self._lock:
                try:
                    self.simulation.step()
                except Exception:
                    logger.exception("Simulation tick %s failed", self.simulation.tick)
                    raise
            await asyncio.sleep(self.tick_interval)

    def current_state(self) -> dict:
        sim = self.simulation
        metrics = asdict(sim.metrics.snapshot(sim.tick, sim.spawned_count))
        state = sim.snapshot()
        state["metrics"] = metrics
        state["running"] = self.running
        state["scheduler"] = sim.building.scheduler_name
        return state

    async def adjust(self, adjustment: ParameterAdjustment) -> dict:
        async with self._lock:
            applied = self.simulation.adjust(adjustment.name, adjustment.value)
            state = self.current_state()
            state["applied"] = {adjustment.name: applied}
            return state

    async def request_elevator(self, request: ElevatorRequest) -> dict:
        async with self._lock:
            elevator = self.simulation.request_elevator(request.floor, request.direction)
            state = self.current_state()
            state["assigned_elevator"] = elevator.elevator_id if elevator else None
            return state

    def parameters(self) -> dict:
        """Bounds, default and current value of every adjustable parameter."""
        return {
            name: {
                "min": bounds.minimum,
                "max": bounds.maximum,
                "default": bounds.default,
                "value": self.simulation.value(name),
            }
            for name, bounds in PARAMETER_BOUNDS.items()
        }

