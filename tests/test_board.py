"""
Tests for the board shift/merge engine.
"""

import random

import pytest

from config import DIRECTIONS
from models import Board, combines
from conftest import TERMINAL_CELLS


class TestShiftVectors:
    """Known boards before and after each direction."""

    def test_left(self):
        b = Board(cells=[3, 0, 1, 2, 6, 6, 1, 2, 12, 6, 3, 1, 0, 3, 6, 6], max_value=12)
        freed = b.left()
        assert freed == [3, 7, 15]
        assert b.cells == [3, 1, 2, 0, 12, 1, 2, 0, 12, 6, 3, 1, 3, 6, 6, 0]

    def test_right(self):
        b = Board(cells=[3, 0, 1, 2, 6, 6, 1, 3, 12, 6, 3, 1, 0, 3, 6, 6], max_value=12)
        freed = b.right()
        assert sorted(freed) == [0, 4, 12]
        assert b.cells == [0, 3, 0, 3, 0, 12, 1, 3, 12, 6, 3, 1, 0, 0, 3, 12]

    def test_up(self):
        b = Board(cells=[3, 0, 1, 2, 6, 6, 1, 1, 12, 6, 3, 3, 12, 3, 6, 6], max_value=12)
        freed = b.up()
        assert sorted(freed) == [12, 13, 15]
        assert b.cells == [3, 6, 1, 3, 6, 6, 1, 3, 24, 3, 3, 6, 0, 0, 6, 0]
        assert b.max_value == 24

    def test_down(self):
        b = Board(cells=[3, 0, 1, 2, 6, 6, 1, 1, 12, 6, 3, 3, 12, 3, 6, 6], max_value=12)
        freed = b.down()
        assert sorted(freed) == [0, 1, 3]
        assert b.cells == [0, 0, 1, 0, 3, 0, 1, 3, 6, 12, 3, 3, 24, 3, 6, 6]


class TestCombines:
    def test_one_and_two(self):
        assert combines(1, 2)
        assert combines(2, 1)

    def test_small_tiles_do_not_pair_with_themselves(self):
        assert not combines(1, 1)
        assert not combines(2, 2)

    def test_equal_threes_and_up(self):
        for v in (3, 6, 12, 24, 48, 96, 192, 384):
            assert combines(v, v)

    def test_unequal_large_tiles(self):
        assert not combines(3, 6)
        assert not combines(6, 3)
        assert not combines(1, 3)
        assert not combines(2, 3)
        assert not combines(12, 24)


class TestMerge:
    def test_merge_updates_max_only_when_larger(self):
        b = Board(cells=[3, 3, 0, 0] + [0] * 12, max_value=48)
        b.left()
        assert b.cells[0] == 6
        assert b.max_value == 48

    def test_merge_raises_max(self):
        b = Board(cells=[24, 24, 0, 0] + [0] * 12, max_value=24)
        b.left()
        assert b.cells[:4] == [48, 0, 0, 0]
        assert b.max_value == 48

    def test_one_step_per_move(self):
        b = Board(cells=[0, 0, 0, 3] + [0] * 12)
        assert b.left() == [3]
        assert b.cells[:4] == [0, 0, 3, 0]

    def test_only_one_merge_per_line(self):
        b = Board(cells=[3, 3, 3, 3] + [0] * 12, max_value=3)
        b.left()
        assert b.cells[:4] == [6, 3, 3, 0]

    def test_tiles_resting_against_edge_do_not_move(self):
        b = Board(cells=[5, 0, 0, 0] + [0] * 12, max_value=5)
        assert b.left() == []
        assert b.cells[:4] == [5, 0, 0, 0]

    def test_unknown_direction(self):
        with pytest.raises(ValueError):
            Board().shift("sideways")


class TestIllegalMoves:
    def test_terminal_board_rejects_every_direction(self):
        for direction in DIRECTIONS:
            b = Board(cells=TERMINAL_CELLS[:], max_value=3)
            assert b.shift(direction) == []
            assert b.cells == TERMINAL_CELLS
            assert b.max_value == 3

    def test_empty_board_has_no_legal_move(self):
        b = Board()
        for direction in DIRECTIONS:
            assert b.shift(direction) == []


class TestCanMove:
    def test_terminal_example(self):
        assert not Board(cells=TERMINAL_CELLS[:], max_value=3).can_move()

    def test_empty_cell(self):
        cells = TERMINAL_CELLS[:]
        cells[5] = 0
        assert Board(cells=cells, max_value=3).can_move()

    def test_horizontal_pair(self):
        cells = TERMINAL_CELLS[:]
        cells[1] = 3  # 3,3 at 0,1
        assert Board(cells=cells, max_value=3).can_move()

    def test_vertical_pair(self):
        cells = TERMINAL_CELLS[:]
        cells[5] = 2  # 1 above, 1 below; 2s either side do not pair
        assert Board(cells=cells, max_value=3).can_move()


class TestShiftProperties:
    """Random boards: moves never add tiles or value, freed cells are empty."""

    def _random_board(self, rng):
        values = [0, 0, 0, 1, 2, 3, 3, 6, 6, 12, 24]
        cells = [rng.choice(values) for _ in range(16)]
        return Board(cells=cells, max_value=max(cells))

    @pytest.mark.parametrize("direction", DIRECTIONS)
    def test_sum_and_count_never_increase(self, direction):
        rng = random.Random(99)
        for _ in range(300):
            b = self._random_board(rng)
            before_sum = sum(b.cells)
            before_count = sum(1 for v in b.cells if v)
            before_max = b.max_value
            freed = b.shift(direction)

            assert sum(b.cells) <= before_sum
            assert sum(1 for v in b.cells if v) <= before_count
            assert b.max_value >= before_max
            for idx in freed:
                assert b.cells[idx] == 0

    @pytest.mark.parametrize("direction", DIRECTIONS)
    def test_illegal_move_leaves_board_alone(self, direction):
        rng = random.Random(7)
        for _ in range(300):
            b = self._random_board(rng)
            before = b.clone()
            if not b.shift(direction):
                assert b == before


class TestSetAndSnapshot:
    def test_set_refuses_occupied_cell(self):
        b = Board()
        assert b.set(5, 3)
        assert not b.set(5, 1)
        assert b.cells[5] == 3

    def test_placement_raises_max(self):
        b = Board()
        b.set(0, 192)
        assert b.max_value == 192

    def test_snapshot_is_a_copy(self):
        b = Board()
        b.set(0, 3)
        snap = b.snapshot()
        b.set(1, 6)
        assert snap.cells[1] == 0
        assert snap.max_value == 3
        assert snap.rows()[0] == [3, 0, 0, 0]

    def test_rejects_bad_cells(self):
        with pytest.raises(ValueError):
            Board(cells=[0] * 15)
        with pytest.raises(ValueError):
            Board(cells=[-1] + [0] * 15)
