import random

import pytest

from models import Position, Tile
from solver.errors import InvariantViolation
from solver.tiling import Tiling


def _tile(x1, y1, x2, y2):
    return Tile(Position(x1, y1), Position(x2, y2))


def _covered(tiling):
    return {cell for t in tiling.tiles for cell in (t.a, t.b)}


def test_free_positions_x_outer_y_inner():
    t = Tiling(2, 2)
    assert t.free_positions() == [Position(0, 0), Position(0, 1), Position(1, 0), Position(1, 1)]


def test_occupied_cells_are_not_free():
    t = Tiling(3, 2, [_tile(0, 0, 1, 0)])
    assert not t.is_free_position(Position(0, 0))
    assert not t.is_free_position(Position(1, 0))
    assert t.is_free_position(Position(2, 0))
    assert not t.is_free_position(Position(3, 0))
    assert len(t.free_positions()) == 4
    assert not t.is_complete()


def test_overlapping_tiles_rejected():
    with pytest.raises(InvariantViolation):
        Tiling(3, 2, [_tile(0, 0, 1, 0), _tile(1, 0, 1, 1)])


def test_out_of_bounds_tile_rejected():
    with pytest.raises(InvariantViolation):
        Tiling(2, 2, [_tile(1, 0, 2, 0)])


def test_extended_returns_new_tiling():
    base = Tiling(2, 2)
    child = base.extended(_tile(0, 0, 0, 1))
    assert base.tiles == ()
    assert len(child.tiles) == 1
    with pytest.raises(InvariantViolation):
        child.extended(_tile(0, 1, 1, 1))


def test_connected_vacancy():
    assert Tiling(4, 2).has_connected_vacancy()
    split = Tiling(4, 1, [_tile(1, 0, 2, 0)])
    assert not split.has_connected_vacancy()
    full = Tiling(2, 1, [_tile(0, 0, 1, 0)])
    assert full.is_complete()
    assert full.has_connected_vacancy()


def test_zero_area_board_is_complete():
    assert Tiling(0, 0).is_complete()
    assert Tiling(0, 5).is_complete()
    assert Tiling(0, 0).generate_children(random.Random(0)) == []


def test_children_branch_on_most_constrained_cell():
    # (0,0) and (2,1) each have a single free neighbour; every other free
    # cell has two.
    t = Tiling(3, 2, [_tile(1, 0, 2, 0)])
    for seed in range(10):
        children = t.generate_children(random.Random(seed), forced_moves=False)
        assert len(children) == 1
        new_tile = children[0].tiles[-1]
        assert new_tile in (_tile(0, 0, 0, 1), _tile(2, 1, 1, 1))
        assert children[0].tiles[:1] == t.tiles


def test_children_of_empty_square_without_forced_moves():
    children = Tiling(2, 2).generate_children(random.Random(3), forced_moves=False)
    assert len(children) == 2
    first, second = children[0].tiles[0], children[1].tiles[0]
    assert first != second
    assert first.cells & second.cells


def test_children_of_empty_square_with_forced_moves_are_complete():
    children = Tiling(2, 2).generate_children(random.Random(3), forced_moves=True)
    assert len(children) == 2
    assert all(c.is_complete() for c in children)
    assert {frozenset(c.tiles) for c in children} == {
        frozenset({_tile(0, 0, 1, 0), _tile(0, 1, 1, 1)}),
        frozenset({_tile(0, 0, 0, 1), _tile(1, 0, 1, 1)}),
    }


def test_stranded_cell_yields_no_children():
    t = Tiling(3, 1, [_tile(1, 0, 2, 0)])
    assert t.free_positions() == [Position(0, 0)]
    assert t.generate_children(random.Random(0)) == []


def test_complete_tiling_yields_no_children():
    t = Tiling(2, 1, [_tile(0, 0, 1, 0)])
    assert t.generate_children(random.Random(0)) == []


def test_forced_moves_fill_a_strip():
    t = Tiling(6, 1).advance_forced_moves(random.Random(0))
    assert t.is_complete()
    assert set(t.tiles) == {_tile(0, 0, 1, 0), _tile(2, 0, 3, 0), _tile(4, 0, 5, 0)}


def test_forced_moves_keep_existing_tiles():
    base = Tiling(3, 2, [_tile(1, 0, 2, 0)])
    advanced = base.advance_forced_moves(random.Random(0))
    assert advanced.tiles[:1] == base.tiles
    assert advanced.is_complete()
    assert len(_covered(advanced)) == 6


def test_forced_moves_noop_returns_same_object():
    t = Tiling(2, 2)
    assert t.advance_forced_moves(random.Random(0)) is t


def test_children_are_reproducible_with_seeded_rng():
    t = Tiling(6, 5, [_tile(0, 0, 1, 0)])
    a = t.generate_children(random.Random(11))
    b = t.generate_children(random.Random(11))
    assert [c.tiles for c in a] == [c.tiles for c in b]
    assert [[x.tag for x in c.tiles] for c in a] == [[x.tag for x in c.tiles] for c in b]
