"""Level descriptors, defaults, and the built-in level list."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from torus_snake.errors import LevelConfigError, UnknownLevelError
from torus_snake.snake import Heading

logger = logging.getLogger(__name__)

# Integer heading codes used by existing level files.
_HEADING_CODES: dict[int, Heading] = {
    0: Heading.UP,
    1: Heading.LEFT,
    2: Heading.DOWN,
    3: Heading.RIGHT,
}


class LevelDescriptor(BaseModel):
    """A partial level description; every field may be left out.

    Both snake_case field names and the camelCase keys used by existing
    level files (``snake``, ``blocker``, ``direction``, ``gameSpeed``,
    ``speedSteps``, ``spawnFood``) are accepted.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    body: list[int] | None = Field(default=None, alias="snake", min_length=1)
    food: list[int] | None = None
    blockers: list[int] | None = Field(default=None, alias="blocker")
    rows: int | None = Field(default=None, ge=1)
    cols: int | None = Field(default=None, ge=1)
    heading: Heading | None = Field(default=None, alias="direction")
    speed: float | None = Field(default=None, gt=0, alias="gameSpeed")
    speed_step: float | None = Field(default=None, ge=0, alias="speedSteps")
    goal: int | None = Field(default=None, ge=1)
    replenish_food: bool | None = Field(default=None, alias="spawnFood")

    @field_validator("heading", mode="before")
    @classmethod
    def _normalize_heading(cls, value: object) -> object:
        if isinstance(value, str) and not isinstance(value, Heading):
            return value.lower()
        if isinstance(value, int) and not isinstance(value, bool):
            if value not in _HEADING_CODES:
                raise ValueError(f"heading code must be 0..3, got {value}")
            return _HEADING_CODES[value]
        return value

    @field_validator("goal", mode="before")
    @classmethod
    def _zero_goal_is_unbounded(cls, value: object) -> object:
        if value == 0 and not isinstance(value, bool):
            return None
        return value


@dataclass(frozen=True)
class LevelConfig:
    """A fully resolved level.

    ``body`` and ``food`` may be ``None``, in which case the engine seeds
    a random three-cell body or a single random food cell at reset.
    ``goal`` of ``None`` means the level cannot be won.
    """

    rows: int = 10
    cols: int = 10
    heading: Heading = Heading.UP
    speed: float = 500.0
    speed_step: float = 20.0
    goal: int | None = None
    replenish_food: bool = True
    body: tuple[int, ...] | None = None
    food: tuple[int, ...] | None = None
    blockers: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.rows < 1 or self.cols < 1:
            raise LevelConfigError("rows and cols must each be at least 1.")
        size = self.rows * self.cols
        for name in ("body", "food", "blockers"):
            cells = getattr(self, name)
            if cells is None:
                continue
            bad = sorted(c for c in cells if not 0 <= c < size)
            if bad:
                raise LevelConfigError(
                    f"{name} cells {bad} are outside the "
                    f"{self.rows}x{self.cols} grid.",
                )
        if self.body is not None and len(set(self.body)) != len(self.body):
            raise LevelConfigError("body cells must not repeat.")

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dict."""
        d = asdict(self)
        d["heading"] = self.heading.value
        d["blockers"] = sorted(self.blockers)
        for name in ("body", "food"):
            if d[name] is not None:
                d[name] = list(d[name])
        return d


def resolve(
    partial: LevelDescriptor | Mapping | None = None,
) -> LevelConfig:
    """Merge a partial level description with the defaults.

    A field counts as set when it is present and not ``None``; explicit
    falsy values such as ``replenish_food=False`` or ``food=[]`` are kept.
    """
    if partial is None:
        descriptor = LevelDescriptor()
    elif isinstance(partial, LevelDescriptor):
        descriptor = partial
    else:
        try:
            descriptor = LevelDescriptor.model_validate(partial)
        except ValidationError as exc:
            raise LevelConfigError(str(exc)) from exc

    fields = descriptor.model_dump(exclude_none=True)
    for name in ("body", "food"):
        if name in fields:
            fields[name] = tuple(fields[name])
    if "blockers" in fields:
        fields["blockers"] = frozenset(fields["blockers"])
    if "speed" in fields:
        fields["speed"] = float(fields["speed"])
    if "speed_step" in fields:
        fields["speed_step"] = float(fields["speed_step"])

    config = LevelConfig(**fields)
    _warn_overlaps(config)
    return config


def _warn_overlaps(config: LevelConfig) -> None:
    body = set(config.body or ())
    food = set(config.food or ())
    clashes = (body & config.blockers) | (food & (body | config.blockers))
    if clashes:
        logger.warning(
            "Level places several items on cells %s.", sorted(clashes),
        )


def get_level(
    index: int,
    levels: Sequence[LevelDescriptor] | None = None,
) -> LevelDescriptor:
    """Select a level descriptor by its position in *levels*."""
    levels = LEVELS if levels is None else levels
    if not 0 <= index < len(levels):
        raise UnknownLevelError(
            f"Level {index} does not exist; choose 0..{len(levels) - 1}.",
        )
    return levels[index]


def load_levels(path: str | Path) -> list[LevelDescriptor]:
    """Load a JSON array of level descriptors."""
    try:
        raw = json.loads(Path(path).read_text())
    except OSError as exc:
        raise LevelConfigError(f"Cannot read levels file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise LevelConfigError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise LevelConfigError(f"{path} must contain a JSON array of levels.")
    try:
        levels = [LevelDescriptor.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise LevelConfigError(str(exc)) from exc
    logger.info("Loaded %d levels from %s", len(levels), path)
    return levels


_BORDER_10X10 = [
    *range(0, 10),
    10, 20, 30, 40, 50, 60, 70, 80, 90,
    19, 29, 39, 49, 59, 69, 79, 89, 99,
    91, 92, 93, 94, 95, 96, 97, 98,
]

_MAZE_12X12 = [
    25, 28, 37, 40, 49, 50, 51, 52,
    31, 34, 43, 46, 55, 56, 57, 58,
    85, 88, 97, 100, 109, 110, 111, 112,
    91, 94, 103, 106, 115, 116, 117, 118,
]

LEVELS: list[LevelDescriptor] = [
    LevelDescriptor(
        rows=10, cols=10, heading=Heading.RIGHT, speed=300, speed_step=20,
        body=[55, 54, 53], food=[15], blockers=[],
    ),
    LevelDescriptor(
        rows=10, cols=10, heading=Heading.RIGHT, speed=500, speed_step=20,
        body=[55, 54, 53], food=[15], blockers=_BORDER_10X10,
    ),
    LevelDescriptor(
        rows=12, cols=12, heading=Heading.RIGHT, speed=500, speed_step=20,
        body=[75, 74, 73], food=[38, 44, 98, 104], blockers=_MAZE_12X12,
        goal=4, replenish_food=False,
    ),
]
