from __future__ import annotations


class InvariantViolation(RuntimeError):
    """Raised when the simulation reaches a state that correct logic never produces.

    These are fatal to the current tick and are never retried.
    """


class ConfigurationError(ValueError):
    """Raised when a configuration value is refused at the boundary."""
