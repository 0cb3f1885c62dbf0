# solver/generator.py: steppable backtracking walk over partial tilings
"""Randomised domino tiling search exposed one step at a time.

The walk keeps a single cursor into a :class:`~solver.tree.SearchTree`.
Every call to :func:`advance` moves that cursor once and reports the tiles of
the node it lands on:

* the first call reports the empty root board;
* a forward step expands the cursor (if needed) and descends into a random
  viable child;
* a backward step climbs to the parent, continuing straight past ancestors
  whose free region is already split.

A run ends with :class:`Done` once the cursor's tiling covers the board, or
with :class:`Failed` when the root itself runs out of viable children. The
state object owns its whole tree, so abandoning a run is just dropping the
reference.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Tuple, Union

from config import CFG
from models import Tile
from solver.errors import (
    ConfigurationError,
    GeneratorFinished,
    InvariantViolation,
    StepLimitExceeded,
)
from solver.tiling import Tiling
from solver.tree import SearchTree

logger = logging.getLogger(__name__)


# ---------- step results ----------

@dataclass(frozen=True)
class InProgress:
    tiles: Tuple[Tile, ...]
    step: int
    status: str = field(default="in_progress", init=False)
    final: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Done:
    tiles: Tuple[Tile, ...]
    step: int
    status: str = field(default="done", init=False)
    final: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Failed:
    reason: str
    width: int
    height: int
    step: int
    status: str = field(default="failed", init=False)
    final: bool = field(default=True, init=False)

    @property
    def tiles(self) -> Tuple[Tile, ...]:
        return ()


StepResult = Union[InProgress, Done, Failed]


# ---------- run state ----------

@dataclass
class GeneratorState:
    width: int
    height: int
    rng: random.Random
    forced_moves: bool
    tree: SearchTree
    cursor: int
    steps: int = 0
    backtracks: int = 0
    started: bool = False
    result: Optional[StepResult] = None

    @property
    def finished(self) -> bool:
        return self.result is not None

    @property
    def tiling(self) -> Tiling:
        return self.tree[self.cursor].tiling


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


def create_generator(
    width: int,
    height: int,
    rng: Optional[random.Random] = None,
    *,
    forced_moves: Optional[bool] = None,
    require_even_area: Optional[bool] = None,
) -> GeneratorState:
    """Build the root tiling and tree for a ``width`` × ``height`` board.

    A board with zero area is accepted and completes on the first step.
    """
    width = _check_dimension("width", width)
    height = _check_dimension("height", height)
    if require_even_area is None:
        require_even_area = CFG.REQUIRE_EVEN_AREA
    if require_even_area and (width * height) % 2:
        raise ConfigurationError(
            f"a {width}x{height} board has odd area {width * height} and cannot be tiled by dominoes"
        )
    if forced_moves is None:
        forced_moves = CFG.FORCED_MOVES

    tree = SearchTree(Tiling(width, height, ()))
    state = GeneratorState(
        width=width,
        height=height,
        rng=rng or random.Random(),
        forced_moves=bool(forced_moves),
        tree=tree,
        cursor=tree.root,
    )
    logger.debug("created generator for %dx%d (forced_moves=%s)", width, height, state.forced_moves)
    return state


# ---------- transitions ----------

def _emit(state: GeneratorState) -> StepResult:
    tiling = state.tiling
    if tiling.is_complete():
        if 2 * len(tiling.tiles) != tiling.area:
            raise InvariantViolation(
                f"complete {state.width}x{state.height} tiling has {len(tiling.tiles)} tiles"
            )
        state.result = Done(tiles=tiling.tiles, step=state.steps)
        logger.info(
            "tiling %dx%d done after %d steps (%d backtracks, %d nodes)",
            state.width, state.height, state.steps, state.backtracks, len(state.tree),
        )
        return state.result
    return InProgress(tiles=tiling.tiles, step=state.steps)


def _fail(state: GeneratorState) -> Failed:
    reason = (
        f"No complete tiling found for {state.width}x{state.height} board "
        f"after {state.steps} steps"
    )
    state.result = Failed(reason=reason, width=state.width, height=state.height, step=state.steps)
    logger.info("%s (%d nodes explored)", reason, len(state.tree))
    return state.result


def _backtrack(state: GeneratorState) -> StepResult:
    tree = state.tree
    parent = tree[state.cursor].parent
    if parent is None:
        return _fail(state)
    state.cursor = parent
    state.backtracks += 1

    # Ancestors whose free region is already split cannot lead anywhere.
    while not tree[state.cursor].tiling.has_connected_vacancy():
        node = tree[state.cursor]
        node.viable = False
        if node.parent is None:
            return _fail(state)
        state.cursor = node.parent
        state.backtracks += 1

    logger.debug("step %d: backtracked to node %d", state.steps, state.cursor)
    return _emit(state)


def advance(state: GeneratorState) -> StepResult:
    """Perform one transition of the walk and report where the cursor is."""
    if state.finished:
        raise GeneratorFinished(
            f"{state.width}x{state.height} run already finished with status {state.result.status!r}"
        )
    state.steps += 1

    if not state.started:
        state.started = True
        return _emit(state)

    tree = state.tree
    while True:
        node = tree[state.cursor]
        if not node.viable:
            return _backtrack(state)

        tree.expand(state.cursor, state.rng, forced_moves=state.forced_moves)
        viable = tree.viable_children(state.cursor)
        if not viable:
            node.viable = False
            continue

        state.cursor = state.rng.choice(viable)
        logger.debug(
            "step %d: descended to node %d (%d tiles)",
            state.steps, state.cursor, len(tree[state.cursor].tiling.tiles),
        )
        return _emit(state)


def generate_tilings(
    width: int,
    height: int,
    rng: Optional[random.Random] = None,
    **options,
) -> Iterator[StepResult]:
    """Lazily yield every step of a run, ending with its Done/Failed result."""
    state = create_generator(width, height, rng, **options)
    while True:
        result = advance(state)
        yield result
        if result.final:
            return


def run_to_completion(
    state: GeneratorState,
    max_steps: Optional[int] = None,
    on_step: Optional[Callable[[StepResult], None]] = None,
) -> StepResult:
    """Advance ``state`` until it finishes.

    ``on_step`` sees every intermediate result. Raises
    :class:`StepLimitExceeded` once ``max_steps`` (if positive) advances have
    been made without finishing.
    """
    if max_steps is None:
        max_steps = CFG.MAX_STEPS
    result = state.result
    while result is None or not result.final:
        if max_steps and max_steps > 0 and state.steps >= max_steps:
            raise StepLimitExceeded(
                f"{state.width}x{state.height} run still searching after {state.steps} steps",
                state.steps,
            )
        result = advance(state)
        if on_step is not None and not result.final:
            on_step(result)
    return result


__all__ = [
    "InProgress",
    "Done",
    "Failed",
    "StepResult",
    "GeneratorState",
    "create_generator",
    "advance",
    "generate_tilings",
    "run_to_completion",
]
