"""Tick-based snake engine composing grid, body, food and blocker logic."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

import numpy as np

from torus_snake.errors import GridFullError, InvalidStateError
from torus_snake.grid import CellType, Grid
from torus_snake.level import LevelConfig, LevelDescriptor, resolve
from torus_snake.placement import RandomPlacer
from torus_snake.snake import Body, Heading

logger = logging.getLogger(__name__)

SpeedListener = Callable[[float], None]
GameOverListener = Callable[["Outcome"], None]


class EngineState(str, enum.Enum):
    """Coarse engine states."""

    IDLE = "idle"
    READY = "ready"
    RUNNING = "running"
    GAME_OVER = "game_over"


class Outcome(str, enum.Enum):
    """How a finished game ended."""

    WIN = "win"
    LOSS = "loss"


@dataclass
class _Session:
    """All mutable state of one play-through."""

    grid: Grid
    body: Body
    food: set[int]
    blockers: frozenset[int]
    heading: Heading
    speed: float
    speed_step: float
    goal: int | None
    replenish_food: bool
    score: int = 0
    ticks: int = 0


class SnakeEngine:
    """Single-snake, tick-based engine on a toroidal grid.

    The engine owns the body, food, blockers, score, speed and heading of
    the current session. :meth:`reset` replaces all of them; each call to
    :meth:`tick` advances the body by one cell and returns the updated
    state dictionary.
    """

    def __init__(
        self,
        placer: RandomPlacer | None = None,
        seed: int | None = None,
        body_length: int = 3,
    ) -> None:
        self.placer = (
            placer if placer is not None
            else RandomPlacer(np.random.default_rng(seed))
        )
        self.body_length = body_length
        self.state = EngineState.IDLE
        self.outcome: Outcome | None = None
        self.reason: str | None = None
        self._session: _Session | None = None
        self._speed_listeners: list[SpeedListener] = []
        self._game_over_listeners: list[GameOverListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_speed_listener(self, listener: SpeedListener) -> None:
        """Call *listener* with the new speed after every consumption."""
        self._speed_listeners.append(listener)

    def add_game_over_listener(self, listener: GameOverListener) -> None:
        """Call *listener* with the outcome when the game ends."""
        self._game_over_listeners.append(listener)

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def _require_session(self) -> _Session:
        if self._session is None:
            raise InvalidStateError("No level loaded; call reset() first.")
        return self._session

    @property
    def grid(self) -> Grid:
        return self._require_session().grid

    @property
    def body(self) -> list[int]:
        return self._require_session().body.to_list()

    @property
    def food(self) -> set[int]:
        return set(self._require_session().food)

    @property
    def blockers(self) -> frozenset[int]:
        return self._require_session().blockers

    @property
    def heading(self) -> Heading:
        return self._require_session().heading

    @property
    def score(self) -> int:
        return self._require_session().score

    @property
    def speed(self) -> float:
        return self._require_session().speed

    @property
    def goal(self) -> int | None:
        return self._require_session().goal

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(
        self,
        config: LevelConfig | LevelDescriptor | Mapping | None = None,
    ) -> None:
        """Replace all session state with a fresh copy of *config*.

        Unseeded bodies and food are placed at random. If placement fails
        the previous session is left untouched.
        """
        if not isinstance(config, LevelConfig):
            config = resolve(config)

        rows, cols = config.rows, config.cols
        blockers = frozenset(config.blockers)
        if config.body is not None:
            body = Body(config.body)
        else:
            body = Body(
                self.placer.place_body(blockers, rows, cols, self.body_length),
            )
        if config.food is not None:
            food = set(config.food)
        else:
            food = {self.placer.place(set(body) | blockers, rows, cols)}

        self._session = _Session(
            grid=Grid(rows, cols),
            body=body,
            food=food,
            blockers=blockers,
            heading=config.heading,
            speed=config.speed,
            speed_step=config.speed_step,
            goal=config.goal,
            replenish_food=config.replenish_food,
        )
        self.state = EngineState.READY
        self.outcome = None
        self.reason = None
        logger.info(
            "Engine reset: %dx%d grid, body %d, food %d, blockers %d.",
            rows, cols, len(body), len(food), len(blockers),
        )

    def start(self) -> None:
        """Begin accepting ticks."""
        if self.state is not EngineState.READY:
            raise InvalidStateError(
                f"start() requires a ready engine (state={self.state.value}).",
            )
        self.state = EngineState.RUNNING

    def set_heading(self, heading: Heading | str) -> None:
        """Overwrite the heading; it takes effect on the next tick.

        Reversals are not filtered: turning back onto the neck is caught
        by the collision check.
        """
        self._require_session().heading = Heading(heading)

    def tick(self) -> dict:
        """Advance the game by one cell.

        Returns the full game state as a serializable dict.
        """
        if self.state is not EngineState.RUNNING:
            raise InvalidStateError(
                f"tick() requires a running engine (state={self.state.value}).",
            )
        s = self._require_session()
        next_head = s.grid.neighbor(s.body.head, s.heading)
        s.ticks += 1

        # --- collision ---
        if next_head in s.body or next_head in s.blockers:
            reason = "self" if next_head in s.body else "blocker"
            self._finish(Outcome.LOSS, reason)
            return self.get_state()

        # --- consumption ---
        if next_head in s.food:
            replacement = (
                self._replacement_food(s, next_head)
                if s.replenish_food else None
            )
            s.food.discard(next_head)
            if replacement is not None:
                s.food.add(replacement)
            s.body.advance(next_head, grow=True)
            s.score += 1
            s.speed -= s.speed_step / (s.score + 1)
            for listener in list(self._speed_listeners):
                listener(s.speed)
            if s.goal is not None and s.score == s.goal:
                self._finish(Outcome.WIN, "goal")
            return self.get_state()

        # --- plain move ---
        s.body.advance(next_head)
        return self.get_state()

    def _replacement_food(self, s: _Session, eaten: int) -> int | None:
        occupied = set(s.body) | {eaten} | (s.food - {eaten}) | s.blockers
        try:
            return self.placer.place(occupied, s.grid.rows, s.grid.cols)
        except GridFullError:
            logger.warning("Board is full; no food replenished.")
            return None

    def _finish(self, outcome: Outcome, reason: str) -> None:
        """Mark the game as over and notify listeners."""
        s = self._require_session()
        self.state = EngineState.GAME_OVER
        self.outcome = outcome
        self.reason = reason
        logger.info(
            "Game over (%s, %s) at tick %d with score %d.",
            outcome.value, reason, s.ticks, s.score,
        )
        for listener in list(self._game_over_listeners):
            listener(outcome)

    # ------------------------------------------------------------------
    # Output surface
    # ------------------------------------------------------------------

    def cell_type(self, index: int) -> CellType:
        """Classify a single cell for rendering."""
        s = self._require_session()
        if index in s.body:
            return CellType.SNAKE
        if index in s.food:
            return CellType.FOOD
        if index in s.blockers:
            return CellType.BLOCKER
        return CellType.EMPTY

    def is_head(self, index: int) -> bool:
        return self._require_session().body.head == index

    def head_rotation(self) -> int:
        return self._require_session().heading.rotation

    def get_state(self) -> dict:
        """Return the full, serializable game state."""
        if self._session is None:
            return {"state": self.state.value, "outcome": None}
        s = self._session
        cells = s.grid.classify(s.body, s.food, s.blockers)
        return {
            "tick": s.ticks,
            "state": self.state.value,
            "outcome": self.outcome.value if self.outcome else None,
            "reason": self.reason,
            "score": s.score,
            "speed": s.speed,
            "goal": s.goal,
            "heading": s.heading.value,
            "head": s.body.head,
            "head_rotation": s.heading.rotation,
            "body": s.body.to_list(),
            "food": sorted(s.food),
            "blockers": sorted(s.blockers),
            "grid": {**s.grid.to_dict(), "cells": cells.tolist()},
        }
