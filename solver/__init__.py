"""Domino tiling search engine."""

from solver.errors import (
    ConfigurationError,
    GeneratorFinished,
    InvariantViolation,
    StepLimitExceeded,
    TilingError,
)
from solver.generator import (
    Done,
    Failed,
    GeneratorState,
    InProgress,
    StepResult,
    advance,
    create_generator,
    generate_tilings,
    run_to_completion,
)
from solver.tiling import Tiling
from solver.tree import SearchNode, SearchTree

__all__ = [
    "ConfigurationError",
    "GeneratorFinished",
    "InvariantViolation",
    "StepLimitExceeded",
    "TilingError",
    "Done",
    "Failed",
    "GeneratorState",
    "InProgress",
    "StepResult",
    "advance",
    "create_generator",
    "generate_tilings",
    "run_to_completion",
    "Tiling",
    "SearchNode",
    "SearchTree",
]
