"""Exception types raised by the snake engine and its collaborators."""

from __future__ import annotations


class SnakeEngineError(Exception):
    """Base class for all engine errors."""


class InvalidStateError(SnakeEngineError, RuntimeError):
    """An operation was invoked in an engine state that does not allow it."""


class GridFullError(SnakeEngineError, RuntimeError):
    """No free cell is left on the grid."""


class LevelConfigError(SnakeEngineError, ValueError):
    """A level descriptor is malformed or inconsistent with its grid."""


class UnknownLevelError(SnakeEngineError, IndexError):
    """A level index does not select any configured level."""
