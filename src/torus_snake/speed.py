"""Maps engine speed onto the tick clock interval."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from torus_snake.clock import TickClock
    from torus_snake.engine import SnakeEngine

logger = logging.getLogger(__name__)


class SpeedController:
    """Keeps the tick clock in step with the engine's speed.

    Engine speed decreases without bound as the score grows. The interval
    handed to the clock is floored at *min_interval* speed units.
    """

    def __init__(
        self,
        clock: TickClock,
        min_interval: float = 20.0,
        unit: float = 0.001,
    ) -> None:
        if min_interval <= 0:
            raise ValueError("min_interval must be positive.")
        self.clock = clock
        self.min_interval = min_interval
        self.unit = unit
        self.speed: float | None = None
        self._floored = False

    def attach(self, engine: SnakeEngine) -> None:
        """Follow *engine*'s speed changes."""
        engine.add_speed_listener(self.on_speed_change)

    @property
    def interval(self) -> float:
        """Current interval in speed units, never below the floor."""
        if self.speed is None:
            raise RuntimeError("No speed set.")
        return max(self.speed, self.min_interval)

    @property
    def interval_seconds(self) -> float:
        return self.interval * self.unit

    def start(self, speed: float) -> None:
        """Start the clock at *speed*."""
        self.speed = speed
        self._floored = False
        self.clock.start(self.interval_seconds)

    def stop(self) -> None:
        self.clock.stop()

    def on_speed_change(self, speed: float) -> None:
        self.speed = speed
        if speed < self.min_interval and not self._floored:
            self._floored = True
            logger.warning(
                "Speed %.2f is below the floor; ticking every %.2f.",
                speed, self.min_interval,
            )
        if self.clock.running:
            self.clock.reschedule(self.interval_seconds)
