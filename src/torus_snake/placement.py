"""Random placement of food and seed bodies."""

from __future__ import annotations

import logging
from collections.abc import Collection

import numpy as np

from torus_snake.errors import GridFullError
from torus_snake.grid import neighbor
from torus_snake.snake import Heading

logger = logging.getLogger(__name__)


class RandomPlacer:
    """Finds unoccupied cells by uniform resampling.

    Uses a seeded NumPy RNG for deterministic, reproducible placement.
    Resampling is bounded by *max_attempts*; past that the remaining free
    cells are enumerated, so a free cell is always found if one exists.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        max_attempts: int = 1000,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts

    def place(self, occupied: Collection[int], rows: int, cols: int) -> int:
        """Return a uniformly random cell index not in *occupied*."""
        size = rows * cols
        for _ in range(self.max_attempts):
            position = int(self.rng.integers(size))
            if position not in occupied:
                return position

        free = np.setdiff1d(
            np.arange(size), np.fromiter(occupied, dtype=np.int64),
        )
        if free.size == 0:
            raise GridFullError(f"No free cell left on {rows}x{cols} grid.")
        logger.debug(
            "Resampling exhausted after %d attempts; %d free cells remain.",
            self.max_attempts, free.size,
        )
        return int(self.rng.choice(free))

    def place_body(
        self,
        occupied: Collection[int],
        rows: int,
        cols: int,
        length: int = 3,
    ) -> list[int]:
        """Return *length* free cells running right from a random head.

        The run wraps within the head's row.
        """
        if length < 1:
            raise ValueError("Body length must be at least 1.")
        if length > cols:
            raise GridFullError(
                f"A body of length {length} does not fit in {cols} columns.",
            )

        def run_from(head: int) -> list[int]:
            cells = [head]
            while len(cells) < length:
                cells.append(neighbor(cells[-1], Heading.RIGHT, rows, cols))
            return cells

        def is_free(cells: list[int]) -> bool:
            return not any(c in occupied for c in cells)

        size = rows * cols
        for _ in range(self.max_attempts):
            cells = run_from(int(self.rng.integers(size)))
            if is_free(cells):
                return cells

        candidates = [h for h in range(size) if is_free(run_from(h))]
        if not candidates:
            raise GridFullError(
                f"No free run of {length} cells on {rows}x{cols} grid.",
            )
        return run_from(int(self.rng.choice(candidates)))
