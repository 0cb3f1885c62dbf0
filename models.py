from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple


@dataclass(frozen=True, order=True)
class Position:
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


def in_bounds(pos: Position, width: int, height: int) -> bool:
    return 0 <= pos.x < width and 0 <= pos.y < height


def neighbors(pos: Position) -> List[Position]:
    """Up, down, left, right. Callers filter out-of-bounds cells."""
    return [
        Position(pos.x, pos.y - 1),
        Position(pos.x, pos.y + 1),
        Position(pos.x - 1, pos.y),
        Position(pos.x + 1, pos.y),
    ]


def manhattan(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


@dataclass(frozen=True, eq=False)
class Tile:
    """One placed domino: an unordered pair of orthogonally adjacent cells.

    ``tag`` is only used by renderers to pick a colour; it takes no part in
    equality, hashing or overlap tests.
    """

    a: Position
    b: Position
    tag: Optional[int] = field(default=None)

    def __post_init__(self):
        if self.a == self.b:
            raise ValueError(f"tile endpoints must differ, got {self.a} twice")
        if manhattan(self.a, self.b) != 1:
            raise ValueError(f"tile endpoints {self.a} and {self.b} are not adjacent")

    @property
    def cells(self) -> FrozenSet[Position]:
        return frozenset((self.a, self.b))

    @property
    def horizontal(self) -> bool:
        return self.a.y == self.b.y

    def overlaps(self, other: "Tile") -> bool:
        return bool(self.cells & other.cells)

    def bounds(self) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y) in grid cells."""
        return (
            min(self.a.x, self.b.x),
            min(self.a.y, self.b.y),
            max(self.a.x, self.b.x),
            max(self.a.y, self.b.y),
        )

    def to_list(self) -> List[Optional[int]]:
        return [self.a.x, self.a.y, self.b.x, self.b.y, self.tag]

    def __eq__(self, other):
        return isinstance(other, Tile) and self.cells == other.cells

    def __hash__(self):
        return hash(self.cells)

    def __repr__(self):
        return f"Tile(({self.a.x},{self.a.y})-({self.b.x},{self.b.y}))"
