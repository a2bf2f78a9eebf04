"""Runtime settings for the engine and its lifecycle."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Timing and placement tunables.

    Supports JSON serialization so a run can be reproduced.
    """

    # Countdown before a level starts ticking.
    countdown_seconds: int = 3
    countdown_unit: float = 1.0  # seconds per countdown step

    # Level speeds are expressed in milliseconds.
    speed_unit: float = 0.001  # seconds per speed unit
    min_interval: float = 20.0  # floor for the scheduled tick interval

    # Placement
    max_placement_attempts: int = 1000
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.countdown_seconds < 0:
            raise ValueError("countdown_seconds must be >= 0.")
        if self.countdown_unit <= 0 or self.speed_unit <= 0:
            raise ValueError("time units must be positive.")
        if self.min_interval <= 0:
            raise ValueError("min_interval must be positive.")
        if self.max_placement_attempts < 1:
            raise ValueError("max_placement_attempts must be at least 1.")

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write settings to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Settings saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> EngineSettings:
        """Load settings from a JSON file."""
        return cls(**json.loads(Path(path).read_text()))
