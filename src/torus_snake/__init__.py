"""Torus Snake: toroidal snake simulation engine."""

from torus_snake.engine import EngineState, Outcome, SnakeEngine
from torus_snake.grid import CellType, Grid, neighbor, row_col
from torus_snake.level import (
    LEVELS,
    LevelConfig,
    LevelDescriptor,
    get_level,
    load_levels,
    resolve,
)
from torus_snake.lifecycle import LifecycleController, Phase
from torus_snake.placement import RandomPlacer
from torus_snake.settings import EngineSettings
from torus_snake.snake import Body, Heading

__all__ = [
    "LEVELS",
    "Body",
    "CellType",
    "EngineSettings",
    "EngineState",
    "Grid",
    "Heading",
    "LevelConfig",
    "LevelDescriptor",
    "LifecycleController",
    "Outcome",
    "Phase",
    "RandomPlacer",
    "SnakeEngine",
    "get_level",
    "load_levels",
    "neighbor",
    "resolve",
    "row_col",
]
