"""Session lifecycle: countdown, tick clock, input and game over."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable, Sequence

import numpy as np

from torus_snake.clock import TickClock
from torus_snake.controls import InputChannel, Subscription
from torus_snake.engine import Outcome, SnakeEngine
from torus_snake.level import LevelDescriptor, get_level, resolve
from torus_snake.placement import RandomPlacer
from torus_snake.settings import EngineSettings
from torus_snake.snake import Heading
from torus_snake.speed import SpeedController

logger = logging.getLogger(__name__)


class Phase(str, enum.Enum):
    """Coarse states of a play session."""

    IDLE = "idle"
    COUNTDOWN = "countdown"
    RUNNING = "running"
    GAME_OVER = "game_over"


class LifecycleController:
    """Drives one engine through countdown, play and game over.

    Exactly one session is current at a time. Loading a level first tears
    down the previous session's countdown task, tick clock and input
    subscription, so nothing from it can fire into the new one.
    """

    def __init__(
        self,
        levels: Sequence[LevelDescriptor] | None = None,
        settings: EngineSettings | None = None,
        engine: SnakeEngine | None = None,
        inputs: InputChannel | None = None,
        on_update: Callable[[dict], None] | None = None,
        on_game_over: Callable[[Outcome | None], None] | None = None,
    ) -> None:
        self.levels = levels
        self.settings = settings if settings is not None else EngineSettings()
        if engine is None:
            placer = RandomPlacer(
                np.random.default_rng(self.settings.seed),
                max_attempts=self.settings.max_placement_attempts,
            )
            engine = SnakeEngine(placer=placer)
        self.engine = engine
        self.inputs = inputs if inputs is not None else InputChannel()
        self.on_update = on_update
        self.on_game_over = on_game_over

        self.clock = TickClock(self._on_tick)
        self.speed = SpeedController(
            self.clock,
            min_interval=self.settings.min_interval,
            unit=self.settings.speed_unit,
        )
        self.speed.attach(self.engine)
        self.engine.add_game_over_listener(self._on_engine_game_over)

        self.phase = Phase.IDLE
        self.countdown = 0
        self.level: int | None = None
        self.outcome: Outcome | None = None
        self._countdown_task: asyncio.Task | None = None
        self._subscription: Subscription | None = None
        self._finished: asyncio.Future | None = None

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def load_level(self, index: int = 0) -> None:
        """Tear down the current session and count down into level *index*.

        Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        descriptor = get_level(index, self.levels)
        self.teardown()
        self.phase = Phase.IDLE

        self.engine.reset(resolve(descriptor))
        self.level = index
        self.outcome = None
        self.countdown = self.settings.countdown_seconds
        self.phase = Phase.COUNTDOWN
        self._finished = loop.create_future()
        self._countdown_task = loop.create_task(
            self._run_countdown(), name="countdown",
        )
        logger.info("Level %d loaded; counting down from %d.", index, self.countdown)
        self._notify()

    def teardown(self) -> None:
        """Cancel the countdown, clock and input subscription, if any."""
        task, self._countdown_task = self._countdown_task, None
        if task is not None and not task.done():
            task.cancel()
        self.speed.stop()
        self._stop_listening()
        if self._finished is not None and not self._finished.done():
            self._finished.cancel()

    def close(self) -> None:
        """Tear down and return to idle."""
        self.teardown()
        self.phase = Phase.IDLE
        self.countdown = 0

    async def wait_finished(self) -> Outcome | None:
        """Wait for the current session to reach game over."""
        if self._finished is None:
            raise RuntimeError("No session loaded.")
        return await self._finished

    # ------------------------------------------------------------------
    # Internal transitions
    # ------------------------------------------------------------------

    async def _run_countdown(self) -> None:
        try:
            while self.countdown > 0:
                await asyncio.sleep(self.settings.countdown_unit)
                self.countdown -= 1
                self._notify()
        except asyncio.CancelledError:
            logger.debug("Countdown cancelled.")
            return
        except Exception:
            logger.exception("Countdown failed in level %s.", self.level)
            self._countdown_task = None
            self._end_session(None)
            return
        self._countdown_task = None
        try:
            self._begin_running()
        except Exception:
            logger.exception("Could not start level %s.", self.level)
            self._end_session(None)

    def _begin_running(self) -> None:
        self._subscription = self.inputs.subscribe(self._on_input)
        self.engine.start()
        self.phase = Phase.RUNNING
        self.speed.start(self.engine.speed)
        logger.info("Level %s running.", self.level)
        self._notify()

    def _on_input(self, heading: Heading) -> None:
        self.engine.set_heading(heading)

    def _on_tick(self) -> None:
        try:
            state = self.engine.tick()
            if self.on_update is not None:
                self.on_update(self._decorate(state))
        except Exception:
            logger.exception("Tick failed in level %s.", self.level)
            if self.phase is not Phase.GAME_OVER:
                self._end_session(None)

    def _on_engine_game_over(self, outcome: Outcome) -> None:
        self._end_session(outcome)

    def _end_session(self, outcome: Outcome | None) -> None:
        self.speed.stop()
        self._stop_listening()
        self.phase = Phase.GAME_OVER
        self.outcome = outcome
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(outcome)
        if self.on_game_over is not None:
            self.on_game_over(outcome)

    def _stop_listening(self) -> None:
        sub, self._subscription = self._subscription, None
        if sub is not None:
            sub.cancel()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _decorate(self, state: dict) -> dict:
        return {
            **state,
            "phase": self.phase.value,
            "countdown": self.countdown,
            "level": self.level,
        }

    def snapshot(self) -> dict:
        """Engine state plus phase, countdown and level."""
        return self._decorate(self.engine.get_state())

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.snapshot())
