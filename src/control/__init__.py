"""Real-time control of a running simulation."""

from .manager import ElevatorRequest, ParameterAdjustment, SimulationManager

__all__ = ["ElevatorRequest", "ParameterAdjustment", "SimulationManager"]
