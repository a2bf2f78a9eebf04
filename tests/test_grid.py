"""Tests for the grid module."""

import numpy as np
import pytest

from torus_snake.grid import CellType, Grid, neighbor, row_col
from torus_snake.snake import Heading


class TestRowCol:
    def test_decomposition(self):
        assert row_col(0, 10) == (0, 0)
        assert row_col(37, 10) == (3, 7)
        assert row_col(11, 4) == (2, 3)


class TestNeighborWrap:
    def test_right_wraps_to_row_start(self):
        assert neighbor(9, Heading.RIGHT, 10, 10) == 0

    def test_left_wraps_to_row_end(self):
        assert neighbor(0, Heading.LEFT, 10, 10) == 9

    def test_up_wraps_to_bottom_row(self):
        assert neighbor(0, Heading.UP, 10, 10) == 90

    def test_down_wraps_to_top_row(self):
        assert neighbor(90, Heading.DOWN, 10, 10) == 0

    def test_interior_moves(self):
        assert neighbor(55, Heading.RIGHT, 10, 10) == 56
        assert neighbor(55, Heading.LEFT, 10, 10) == 54
        assert neighbor(55, Heading.UP, 10, 10) == 45
        assert neighbor(55, Heading.DOWN, 10, 10) == 65

    def test_middle_row_edges(self):
        assert neighbor(59, Heading.RIGHT, 10, 10) == 50
        assert neighbor(50, Heading.LEFT, 10, 10) == 59


class TestNeighborProperties:
    @pytest.mark.parametrize("rows,cols", [(10, 10), (3, 5), (5, 3), (1, 4), (4, 1)])
    def test_always_in_range(self, rows, cols):
        for index in range(rows * cols):
            for heading in Heading:
                assert 0 <= neighbor(index, heading, rows, cols) < rows * cols

    @pytest.mark.parametrize("rows,cols", [(10, 10), (3, 5), (5, 3)])
    def test_opposite_moves_return_to_origin(self, rows, cols):
        for index in range(rows * cols):
            for heading in Heading:
                step = neighbor(index, heading, rows, cols)
                assert neighbor(step, heading.opposite, rows, cols) == index

    def test_non_square_up_wrap_keeps_column(self):
        # 4 rows x 6 cols: column 5 of the top row wraps to the bottom row.
        assert neighbor(5, Heading.UP, 4, 6) == 23
        assert neighbor(23, Heading.DOWN, 4, 6) == 5

    def test_full_lap_returns_to_origin(self):
        index = 42
        for _ in range(10):
            index = neighbor(index, Heading.DOWN, 10, 10)
        assert index == 42


class TestGrid:
    def test_dimensions(self):
        grid = Grid(rows=4, cols=6)
        assert grid.size == 24
        assert grid.to_dict() == {"rows": 4, "cols": 6}

    def test_minimum_size_enforced(self):
        with pytest.raises(ValueError, match="at least 1x1"):
            Grid(rows=0, cols=5)

    def test_contains(self):
        grid = Grid(rows=3, cols=3)
        assert grid.contains(0)
        assert grid.contains(8)
        assert not grid.contains(9)
        assert not grid.contains(-1)

    def test_index_and_row_col_agree(self):
        grid = Grid(rows=4, cols=6)
        for i in range(grid.size):
            assert grid.index(*grid.row_col(i)) == i

    def test_neighbor_delegates(self):
        grid = Grid(rows=10, cols=10)
        assert grid.neighbor(9, Heading.RIGHT) == 0


class TestClassify:
    def test_shape_and_codes(self):
        grid = Grid(rows=3, cols=4)
        cells = grid.classify(body=[5, 6], food=[0], blockers=[11])
        assert cells.shape == (3, 4)
        assert cells[1, 1] == CellType.SNAKE
        assert cells[1, 2] == CellType.SNAKE
        assert cells[0, 0] == CellType.FOOD
        assert cells[2, 3] == CellType.BLOCKER
        assert np.count_nonzero(cells == CellType.EMPTY) == 8

    def test_snake_wins_over_food_and_blocker(self):
        grid = Grid(rows=2, cols=2)
        cells = grid.classify(body=[0], food=[0, 1], blockers=[0, 1, 2])
        assert cells[0, 0] == CellType.SNAKE
        assert cells[0, 1] == CellType.FOOD
        assert cells[1, 0] == CellType.BLOCKER

    def test_empty_inputs(self):
        grid = Grid(rows=2, cols=3)
        cells = grid.classify(body=[], food=set(), blockers=frozenset())
        assert np.all(cells == CellType.EMPTY)
