"""Toroidal grid addressing and cell classification."""

from __future__ import annotations

import enum
from collections.abc import Iterable

import numpy as np

from torus_snake.snake import Heading


class CellType(enum.IntEnum):
    """Integer codes stored in the classification array."""

    EMPTY = 0
    SNAKE = 1
    FOOD = 2
    BLOCKER = 3


def row_col(index: int, cols: int) -> tuple[int, int]:
    """Decompose a row-major cell index into ``(row, col)``."""
    row = index // cols
    return row, index - row * cols


def neighbor(index: int, heading: Heading, rows: int, cols: int) -> int:
    """Return the cell one step from *index* towards *heading*.

    Edges wrap to the opposite edge, so the result is always a valid index.
    """
    row, col = row_col(index, cols)
    row_start = row * cols
    row_end = row_start + cols - 1

    if heading is Heading.RIGHT:
        return row_start if index + 1 > row_end else index + 1
    if heading is Heading.LEFT:
        return row_end if index - 1 < row_start else index - 1
    if heading is Heading.UP:
        return index - cols if index - cols >= 0 else (rows - 1) * cols + col
    if heading is Heading.DOWN:
        return index + cols if index + cols < rows * cols else col
    raise ValueError(f"Unknown heading: {heading!r}")


class Grid:
    """Dimensions of a rows x cols toroidal grid.

    Cells are addressed by row-major linear index. The classification
    array produced by :meth:`classify` uses (row, col) ordering consistent
    with NumPy indexing.
    """

    def __init__(self, rows: int = 10, cols: int = 10) -> None:
        if rows < 1 or cols < 1:
            raise ValueError("Grid dimensions must be at least 1x1.")
        self.rows = rows
        self.cols = cols

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def contains(self, index: int) -> bool:
        """Check whether an index addresses a cell of this grid."""
        return 0 <= index < self.size

    def row_col(self, index: int) -> tuple[int, int]:
        return row_col(index, self.cols)

    def index(self, row: int, col: int) -> int:
        return row * self.cols + col

    def neighbor(self, index: int, heading: Heading) -> int:
        return neighbor(index, heading, self.rows, self.cols)

    def classify(
        self,
        body: Iterable[int],
        food: Iterable[int],
        blockers: Iterable[int],
    ) -> np.ndarray:
        """Return a ``(rows, cols)`` array of :class:`CellType` codes.

        A cell holding several things is reported as snake first, then
        food, then blocker.
        """
        flat = np.full(self.size, CellType.EMPTY, dtype=np.int8)
        for cells, cell_type in (
            (blockers, CellType.BLOCKER),
            (food, CellType.FOOD),
            (body, CellType.SNAKE),
        ):
            idx = np.fromiter(cells, dtype=np.int64)
            if idx.size:
                flat[idx] = cell_type
        return flat.reshape(self.rows, self.cols)

    def to_dict(self) -> dict:
        """Serialize grid dimensions to a dictionary."""
        return {"rows": self.rows, "cols": self.cols}
