# solver/errors.py
from __future__ import annotations


class TilingError(Exception):
    """Base class for every error raised by the tiling engine."""


class ConfigurationError(TilingError, ValueError):
    """Board dimensions rejected before a run starts."""


class InvariantViolation(TilingError, RuntimeError):
    """A tiling was about to contain an overlapping or out-of-bounds tile."""


class GeneratorFinished(TilingError, RuntimeError):
    """``advance`` was called on a run that already reported Done or Failed."""


class StepLimitExceeded(TilingError, RuntimeError):
    """``run_to_completion`` gave up after its configured step cap."""

    def __init__(self, message: str, steps: int):
        super().__init__(message)
        self.steps = steps


__all__ = [
    "TilingError",
    "ConfigurationError",
    "InvariantViolation",
    "GeneratorFinished",
    "StepLimitExceeded",
]
