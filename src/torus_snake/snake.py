"""Heading and body representation."""

from __future__ import annotations

import enum
from collections import deque
from collections.abc import Iterable


class Heading(str, enum.Enum):
    """Cardinal directions of travel."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> Heading:
        return _OPPOSITES[self]

    @property
    def rotation(self) -> int:
        """Sprite rotation in degrees for a head facing this way."""
        return _ROTATIONS[self]


_OPPOSITES: dict[Heading, Heading] = {
    Heading.UP: Heading.DOWN,
    Heading.DOWN: Heading.UP,
    Heading.LEFT: Heading.RIGHT,
    Heading.RIGHT: Heading.LEFT,
}

# The head sprite points left at 0 degrees.
_ROTATIONS: dict[Heading, int] = {
    Heading.UP: 90,
    Heading.RIGHT: 180,
    Heading.DOWN: 270,
    Heading.LEFT: 0,
}


class Body:
    """A snake body as an ordered deque of cell indices.

    The head is ``cells[0]``; the tail is ``cells[-1]``.
    """

    def __init__(self, cells: Iterable[int]) -> None:
        self.cells: deque[int] = deque(cells)
        if not self.cells:
            raise ValueError("Body must have at least one cell.")

    @property
    def head(self) -> int:
        """Return the head cell."""
        return self.cells[0]

    @property
    def tail(self) -> int:
        return self.cells[-1]

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, index: object) -> bool:
        return index in self.cells

    def __iter__(self):
        return iter(self.cells)

    def advance(self, new_head: int, grow: bool = False) -> int | None:
        """Prepend *new_head* and drop the tail unless growing.

        Returns the vacated tail cell, or ``None`` if the body grew.
        """
        self.cells.appendleft(new_head)
        if grow:
            return None
        return self.cells.pop()

    def to_list(self) -> list[int]:
        return list(self.cells)
