"""Command-line tools for inspecting levels and running headless games."""

from __future__ import annotations

import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)

_MOVE_LETTERS = {
    "U": "up",
    "D": "down",
    "L": "left",
    "R": "right",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torus-snake",
        description="Toroidal snake engine: level inspection and simulation.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- levels ---
    levels_p = sub.add_parser("levels", help="List the resolved levels.")
    levels_p.add_argument(
        "--levels-file", type=str, default=None,
        help="JSON array of level descriptors (defaults to built-ins).",
    )

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", help="Run a level headless, one tick per move.",
    )
    sim_p.add_argument("--level", type=int, default=0)
    sim_p.add_argument("--levels-file", type=str, default=None)
    sim_p.add_argument(
        "--settings", type=str, default=None,
        help="Path to a JSON settings file.",
    )
    sim_p.add_argument("--seed", type=int, default=None)
    sim_p.add_argument(
        "--moves", type=str, default="",
        help="Heading per tick: U, D, L, R, or '.' to keep the heading.",
    )
    sim_p.add_argument(
        "--max-ticks", type=_positive_int, default=None,
        help="Stop after this many ticks (defaults to the number of moves).",
    )

    return parser


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return n


def _load_levels(path: str | None):
    from torus_snake.level import LEVELS, load_levels

    return load_levels(path) if path else LEVELS


def _run_levels(args: argparse.Namespace) -> int:
    from torus_snake.errors import LevelConfigError
    from torus_snake.level import resolve

    try:
        levels = _load_levels(args.levels_file)
    except LevelConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)  # noqa: T201
        return 2

    for i, descriptor in enumerate(levels):
        config = resolve(descriptor)
        goal = config.goal if config.goal is not None else "-"
        print(  # noqa: T201
            f"{i}: {config.rows}x{config.cols} heading={config.heading.value} "
            f"speed={config.speed:g} step={config.speed_step:g} goal={goal} "
            f"blockers={len(config.blockers)} "
            f"replenish={'yes' if config.replenish_food else 'no'}"
        )
    return 0


def _run_simulate(args: argparse.Namespace) -> int:
    import numpy as np

    from torus_snake.engine import EngineState, SnakeEngine
    from torus_snake.errors import SnakeEngineError
    from torus_snake.level import get_level, resolve
    from torus_snake.placement import RandomPlacer
    from torus_snake.settings import EngineSettings

    settings = (
        EngineSettings.load(args.settings) if args.settings else EngineSettings()
    )
    seed = args.seed if args.seed is not None else settings.seed

    bad = sorted(set(args.moves.upper()) - set(_MOVE_LETTERS) - {"."})
    if bad:
        print(f"Unknown move letters: {''.join(bad)}", file=sys.stderr)  # noqa: T201
        return 2

    try:
        descriptor = get_level(args.level, _load_levels(args.levels_file))
        engine = SnakeEngine(
            placer=RandomPlacer(
                np.random.default_rng(seed),
                max_attempts=settings.max_placement_attempts,
            ),
        )
        engine.reset(resolve(descriptor))
    except SnakeEngineError as exc:
        print(f"Error: {exc}", file=sys.stderr)  # noqa: T201
        return 2

    moves = args.moves.upper()
    max_ticks = args.max_ticks if args.max_ticks is not None else len(moves)
    engine.start()
    for i in range(max_ticks):
        if i < len(moves) and moves[i] != ".":
            engine.set_heading(_MOVE_LETTERS[moves[i]])
        engine.tick()
        if engine.state is EngineState.GAME_OVER:
            break

    state = engine.get_state()
    logger.info(
        "Simulation finished after %d ticks: state=%s score=%d.",
        state["tick"], state["state"], state["score"],
    )
    print(json.dumps(state))  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``torus-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "levels": _run_levels,
        "simulate": _run_simulate,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
