# solver/tiling.py: immutable partial tilings and the child heuristic
from __future__ import annotations

import math
import random
from collections import deque
from typing import Deque, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from config import CFG
from models import Position, Tile, in_bounds, neighbors
from solver.errors import InvariantViolation


def _draw_tag(rng: random.Random) -> int:
    return rng.randrange(max(1, int(CFG.TAG_COUNT)))


class Tiling:
    """A board of ``width`` × ``height`` cells plus the dominoes placed so far.

    Instances are never mutated once built; :meth:`extended` and
    :meth:`advance_forced_moves` return new objects. Construction rejects any
    tile that leaves the board or claims a cell twice.
    """

    __slots__ = ("width", "height", "tiles", "_occupied")

    def __init__(self, width: int, height: int, tiles: Iterable[Tile] = ()):
        self.width = int(width)
        self.height = int(height)
        self.tiles: Tuple[Tile, ...] = tuple(tiles)

        occupied: Set[Position] = set()
        for tile in self.tiles:
            for cell in (tile.a, tile.b):
                if not in_bounds(cell, self.width, self.height):
                    raise InvariantViolation(
                        f"{tile!r} leaves the {self.width}x{self.height} board"
                    )
                if cell in occupied:
                    raise InvariantViolation(
                        f"{tile!r} overlaps an existing tile at ({cell.x},{cell.y})"
                    )
                occupied.add(cell)
        self._occupied: FrozenSet[Position] = frozenset(occupied)

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------
    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    def occupied_positions(self) -> FrozenSet[Position]:
        return self._occupied

    def is_in_bounds(self, pos: Position) -> bool:
        return in_bounds(pos, self.width, self.height)

    def is_free_position(self, pos: Position) -> bool:
        return self.is_in_bounds(pos) and pos not in self._occupied

    def _cells(self) -> Iterator[Position]:
        for x in range(self.width):
            for y in range(self.height):
                yield Position(x, y)

    def free_positions(self) -> List[Position]:
        """Free cells, x outer and y inner."""
        return [p for p in self._cells() if p not in self._occupied]

    def free_neighbors(self, pos: Position) -> List[Position]:
        return [n for n in neighbors(pos) if self.is_free_position(n)]

    def is_complete(self) -> bool:
        return len(self._occupied) == self.area

    def has_connected_vacancy(self) -> bool:
        """True when the free cells form one 4-connected region.

        The empty set counts as connected.
        """
        free = set(self.free_positions())
        if not free:
            return True

        start = next(iter(free))
        seen = {start}
        todo: Deque[Position] = deque([start])
        while todo:
            current = todo.pop()
            for n in neighbors(current):
                if n in free and n not in seen:
                    seen.add(n)
                    todo.append(n)
        return len(seen) == len(free)

    # ------------------------------------------------------------------
    # Extension
    # ------------------------------------------------------------------
    def extended(self, *tiles: Tile) -> "Tiling":
        return Tiling(self.width, self.height, self.tiles + tuple(tiles))

    def advance_forced_moves(self, rng: Optional[random.Random] = None) -> "Tiling":
        """Place every domino that is not a real choice.

        A free cell with exactly one free neighbour can only ever be covered
        by that pair. Placing it can force further cells, so the affected
        neighbourhood is re-queued until nothing is forced any more.
        """
        rng = rng or random.Random()
        occupied = set(self._occupied)
        placed: List[Tile] = []

        def _is_free(p: Position) -> bool:
            return in_bounds(p, self.width, self.height) and p not in occupied

        queue: Deque[Position] = deque(p for p in self._cells() if p not in occupied)
        while queue:
            pos = queue.popleft()
            if not _is_free(pos):
                continue
            free_n = [n for n in neighbors(pos) if _is_free(n)]
            if len(free_n) != 1:
                continue
            mate = free_n[0]
            placed.append(Tile(pos, mate, _draw_tag(rng)))
            occupied.add(pos)
            occupied.add(mate)
            for cell in (pos, mate):
                queue.extend(n for n in neighbors(cell) if _is_free(n))

        if not placed:
            return self
        return self.extended(*placed)

    def generate_children(
        self,
        rng: Optional[random.Random] = None,
        *,
        forced_moves: Optional[bool] = None,
    ) -> List["Tiling"]:
        """Branch on the most constrained free cell.

        Free cells are first shuffled by ``random() - distance_from_centre``
        so ties are broken randomly with a lean towards the rim. The branch
        cell is the first one in that order with the fewest free neighbours;
        one child is produced per free neighbour. An empty list means either
        the board is already complete or the branch cell is stranded.
        """
        rng = rng or random.Random()
        if forced_moves is None:
            forced_moves = CFG.FORCED_MOVES

        free = self.free_positions()
        if not free:
            return []

        cx = self.width / 2
        cy = self.height / 2
        ranks = [rng.random() - math.hypot(p.x - cx, p.y - cy) for p in free]
        ranked = [p for _, p in sorted(zip(ranks, free), key=lambda t: t[0])]

        best: Optional[Position] = None
        best_free: Sequence[Position] = ()
        for pos in ranked:
            free_n = self.free_neighbors(pos)
            if best is None or len(free_n) < len(best_free):
                best = pos
                best_free = free_n
                if not free_n:
                    break

        children: List[Tiling] = []
        for mate in best_free:
            child = self.extended(Tile(best, mate, _draw_tag(rng)))
            if forced_moves:
                child = child.advance_forced_moves(rng)
            children.append(child)
        return children

    def __len__(self) -> int:
        return len(self.tiles)

    def __repr__(self):
        return f"Tiling({self.width}x{self.height}, tiles={len(self.tiles)})"


__all__ = ["Tiling"]
