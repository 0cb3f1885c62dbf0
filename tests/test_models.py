import pytest

from models import Position, Tile, in_bounds, neighbors


def test_neighbors_are_axis_aligned_and_unchecked():
    assert neighbors(Position(0, 0)) == [
        Position(0, -1),
        Position(0, 1),
        Position(-1, 0),
        Position(1, 0),
    ]


def test_in_bounds_half_open():
    assert in_bounds(Position(0, 0), 3, 2)
    assert in_bounds(Position(2, 1), 3, 2)
    assert not in_bounds(Position(3, 1), 3, 2)
    assert not in_bounds(Position(0, 2), 3, 2)
    assert not in_bounds(Position(-1, 0), 3, 2)


def test_tile_is_unordered_and_ignores_tag():
    a, b = Position(1, 1), Position(1, 2)
    assert Tile(a, b, tag=3) == Tile(b, a, tag=7)
    assert hash(Tile(a, b)) == hash(Tile(b, a))
    assert len({Tile(a, b), Tile(b, a, tag=1)}) == 1


def test_overlap_requires_shared_endpoint():
    first = Tile(Position(0, 0), Position(1, 0))
    sharing = Tile(Position(1, 0), Position(1, 1))
    touching = Tile(Position(0, 1), Position(1, 1))
    assert first.overlaps(sharing)
    assert sharing.overlaps(first)
    assert not first.overlaps(touching)


@pytest.mark.parametrize(
    "a, b",
    [
        (Position(0, 0), Position(0, 0)),
        (Position(0, 0), Position(1, 1)),
        (Position(0, 0), Position(2, 0)),
    ],
)
def test_tile_rejects_non_adjacent_cells(a, b):
    with pytest.raises(ValueError):
        Tile(a, b)


def test_tile_bounds_and_orientation():
    t = Tile(Position(3, 2), Position(2, 2), tag=5)
    assert t.horizontal
    assert t.bounds() == (2, 2, 3, 2)
    assert t.to_list() == [3, 2, 2, 2, 5]
    assert not Tile(Position(0, 0), Position(0, 1)).horizontal
