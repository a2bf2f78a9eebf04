"""Tests for the SnakeEngine module."""

import json
import logging

import numpy as np
import pytest

from torus_snake.engine import EngineState, Outcome, SnakeEngine
from torus_snake.errors import GridFullError, InvalidStateError
from torus_snake.grid import CellType, neighbor
from torus_snake.level import LEVELS, resolve
from torus_snake.placement import RandomPlacer
from torus_snake.snake import Heading


def _engine(config=None, seed=0) -> SnakeEngine:
    engine = SnakeEngine(seed=seed)
    engine.reset(config)
    return engine


def _running(config=None, seed=0) -> SnakeEngine:
    engine = _engine(config, seed=seed)
    engine.start()
    return engine


class TestEngineReset:
    def test_starts_idle(self):
        engine = SnakeEngine(seed=0)
        assert engine.state is EngineState.IDLE
        assert engine.get_state() == {"state": "idle", "outcome": None}

    def test_reset_from_level(self):
        engine = _engine(resolve(LEVELS[0]))
        assert engine.state is EngineState.READY
        assert engine.body == [55, 54, 53]
        assert engine.food == {15}
        assert engine.heading is Heading.RIGHT
        assert engine.score == 0
        assert engine.speed == 300
        assert engine.goal is None

    def test_reset_accepts_mapping(self):
        engine = _engine({"rows": 6, "cols": 6, "body": [7, 8]})
        assert engine.grid.rows == 6
        assert engine.body == [7, 8]

    def test_random_seed_body_and_food(self):
        engine = _engine(None, seed=11)
        body = engine.body
        assert len(body) == 3
        assert body[1] == neighbor(body[0], Heading.RIGHT, 10, 10)
        assert body[2] == neighbor(body[1], Heading.RIGHT, 10, 10)
        assert len(engine.food) == 1
        assert not engine.food & set(body)

    def test_random_seed_avoids_blockers(self):
        blockers = [i for i in range(100) if i // 10 != 4]
        engine = _engine({"blockers": blockers}, seed=5)
        assert all(40 <= c < 50 for c in engine.body)
        assert all(40 <= c < 50 for c in engine.food)

    def test_same_seed_same_layout(self):
        a = _engine(None, seed=123)
        b = _engine(None, seed=123)
        assert a.body == b.body
        assert a.food == b.food

    def test_failed_reset_keeps_previous_session(self):
        engine = _engine(resolve(LEVELS[0]))
        with pytest.raises(GridFullError):
            engine.reset({"rows": 1, "cols": 3, "blockers": [0]})
        assert engine.state is EngineState.READY
        assert engine.body == [55, 54, 53]

    def test_reset_after_game_over(self):
        engine = _running({"body": [55, 54, 53], "heading": "left"})
        engine.tick()
        assert engine.state is EngineState.GAME_OVER
        engine.reset(resolve(LEVELS[0]))
        assert engine.state is EngineState.READY
        assert engine.outcome is None
        assert engine.reason is None
        assert engine.get_state()["tick"] == 0


class TestEngineStateGuards:
    def test_tick_when_idle(self):
        with pytest.raises(InvalidStateError):
            SnakeEngine().tick()

    def test_tick_when_ready(self):
        engine = _engine(resolve(LEVELS[0]))
        with pytest.raises(InvalidStateError, match="ready"):
            engine.tick()
        assert engine.body == [55, 54, 53]
        assert engine.get_state()["tick"] == 0

    def test_tick_after_game_over(self):
        engine = _running({"body": [55, 54, 53], "heading": "left"})
        engine.tick()
        with pytest.raises(InvalidStateError):
            engine.tick()

    def test_start_twice(self):
        engine = _running(resolve(LEVELS[0]))
        with pytest.raises(InvalidStateError):
            engine.start()

    def test_session_properties_require_reset(self):
        with pytest.raises(InvalidStateError):
            _ = SnakeEngine().score


class TestEngineMovement:
    def test_plain_move(self):
        engine = _running(resolve(LEVELS[0]))
        state = engine.tick()
        assert engine.body == [56, 55, 54]
        assert state["tick"] == 1
        assert state["head"] == 56

    def test_wraps_across_edge(self):
        engine = _running({"body": [59, 58, 57], "heading": "right", "food": []})
        engine.tick()
        assert engine.body == [50, 59, 58]

    def test_wraps_vertically(self):
        engine = _running({"body": [5, 15, 25], "heading": "up", "food": []})
        engine.tick()
        assert engine.body == [95, 5, 15]

    def test_heading_change(self):
        engine = _running(resolve(LEVELS[0]))
        engine.set_heading(Heading.UP)
        engine.tick()
        assert engine.body[0] == 45

    def test_heading_accepts_string(self):
        engine = _running(resolve(LEVELS[0]))
        engine.set_heading("down")
        assert engine.heading is Heading.DOWN

    def test_latest_heading_wins(self):
        engine = _running(resolve(LEVELS[0]))
        engine.set_heading(Heading.UP)
        engine.set_heading(Heading.DOWN)
        engine.tick()
        assert engine.body[0] == 65

    def test_reversal_is_not_filtered(self):
        engine = _running(resolve(LEVELS[0]))
        engine.set_heading(Heading.LEFT)
        assert engine.heading is Heading.LEFT


class TestEngineCollision:
    def test_self_collision_on_reversal(self):
        engine = _running(resolve(LEVELS[0]))
        engine.set_heading(Heading.LEFT)
        state = engine.tick()
        assert engine.state is EngineState.GAME_OVER
        assert engine.outcome is Outcome.LOSS
        assert engine.reason == "self"
        assert engine.body == [55, 54, 53]
        assert state["outcome"] == "loss"

    def test_moving_into_tail_is_collision(self):
        engine = _running({"body": [11, 1, 0, 10], "heading": "left", "food": []})
        engine.tick()
        assert engine.outcome is Outcome.LOSS
        assert len(engine.body) == 4

    def test_blocker_collision(self):
        engine = _running(resolve(LEVELS[1]))
        for _ in range(3):
            engine.tick()
        assert engine.state is EngineState.RUNNING
        engine.tick()
        assert engine.state is EngineState.GAME_OVER
        assert engine.reason == "blocker"
        assert engine.body == [58, 57, 56]
        assert engine.score == 0

    def test_collision_wins_over_consumption(self):
        engine = _running({"body": [55, 54, 53], "heading": "left", "food": [54]})
        engine.tick()
        assert engine.outcome is Outcome.LOSS
        assert engine.score == 0
        assert engine.food == {54}


class TestEngineConsumption:
    def test_eat_food(self):
        engine = _running({
            "body": [25, 24, 23], "heading": "up", "food": [15],
            "speed": 300, "speed_step": 20, "replenish_food": False,
        })
        before = engine.speed
        engine.tick()
        assert 15 not in engine.food
        assert engine.body == [15, 25, 24, 23]
        assert engine.score == 1
        assert engine.speed == before - 20 / (1 + 1)
        assert engine.speed == 290.0

    def test_speed_formula_over_several_meals(self):
        engine = _running({
            "body": [5, 4, 3], "heading": "right", "food": [6, 7, 8],
            "speed": 500, "speed_step": 20, "replenish_food": False,
        })
        expected = 500.0
        for score in range(1, 4):
            engine.tick()
            expected -= 20 / (score + 1)
            assert engine.score == score
            assert engine.speed == expected

    def test_replenish_places_new_food(self):
        engine = _running(resolve(LEVELS[0]))
        engine.set_heading(Heading.UP)
        for _ in range(4):
            engine.tick()
        assert engine.score == 1
        assert len(engine.food) == 1
        assert 15 not in engine.food
        assert not engine.food & set(engine.body)

    def test_replenish_avoids_blockers(self):
        blockers = [i for i in range(100) if i not in (1, 2, 3, 4)]
        engine = _running({
            "body": [1], "heading": "right", "food": [2], "blockers": blockers,
        })
        engine.tick()
        assert engine.food <= {3, 4}
        assert len(engine.food) == 1

    def test_full_board_skips_replenish(self, caplog):
        caplog.set_level(logging.WARNING, logger="torus_snake.engine")
        engine = _running({
            "rows": 1, "cols": 4, "body": [1, 0], "heading": "right",
            "food": [2, 3],
        })
        engine.tick()
        assert engine.body == [2, 1, 0]
        assert engine.food == {3}
        assert engine.score == 1
        assert "Board is full" in caplog.text

    def test_speed_listener_notified(self):
        engine = _running({"body": [25, 24, 23], "heading": "up", "food": [15]})
        seen = []
        engine.add_speed_listener(seen.append)
        engine.tick()
        assert seen == [engine.speed]

    def test_speed_unchanged_on_plain_move(self):
        engine = _running(resolve(LEVELS[0]))
        seen = []
        engine.add_speed_listener(seen.append)
        engine.tick()
        assert seen == []
        assert engine.speed == 300


class TestEngineGoal:
    def test_win_after_goal_reached(self):
        engine = _running({
            "body": [5, 4, 3], "heading": "right", "food": [6, 7, 8, 9, 50],
            "goal": 4, "replenish_food": False,
        })
        outcomes = []
        engine.add_game_over_listener(outcomes.append)
        for _ in range(3):
            engine.tick()
            assert engine.state is EngineState.RUNNING
        engine.tick()
        assert engine.state is EngineState.GAME_OVER
        assert engine.outcome is Outcome.WIN
        assert engine.reason == "goal"
        assert engine.food == {50}
        assert outcomes == [Outcome.WIN]

    def test_maze_level_is_winnable(self):
        engine = _running(resolve(LEVELS[2]))
        # Head at 75 heading right; food at 98 and 104 lie below.
        engine.set_heading(Heading.DOWN)
        engine.tick()  # 87
        engine.tick()  # 99
        engine.set_heading(Heading.LEFT)
        engine.tick()  # 98, eat
        assert engine.score == 1
        assert engine.food == {38, 44, 104}

    def test_unbounded_goal_never_wins(self):
        engine = _running({
            "body": [5, 4, 3], "heading": "right", "food": [6],
        })
        for _ in range(5):
            engine.tick()
            if engine.state is EngineState.GAME_OVER:
                break
        assert engine.outcome is not Outcome.WIN

    def test_game_over_listener_on_loss(self):
        engine = _running({"body": [55, 54, 53], "heading": "left"})
        outcomes = []
        engine.add_game_over_listener(outcomes.append)
        engine.tick()
        assert outcomes == [Outcome.LOSS]


class TestEngineOutput:
    def test_state_is_json_serializable(self):
        engine = _running(resolve(LEVELS[1]))
        engine.tick()
        serialized = json.dumps(engine.get_state())
        assert isinstance(serialized, str)

    def test_state_structure(self):
        engine = _engine(resolve(LEVELS[0]))
        state = engine.get_state()
        assert state["state"] == "ready"
        assert state["grid"]["rows"] == 10
        assert state["grid"]["cols"] == 10
        assert state["heading"] == "right"
        assert state["head_rotation"] == 180
        assert state["body"] == [55, 54, 53]
        assert state["food"] == [15]
        assert state["goal"] is None

    def test_cells_classification(self):
        engine = _engine(resolve(LEVELS[1]))
        cells = np.array(engine.get_state()["grid"]["cells"])
        assert cells[5, 5] == CellType.SNAKE
        assert cells[1, 5] == CellType.FOOD
        assert cells[0, 0] == CellType.BLOCKER
        assert cells[4, 4] == CellType.EMPTY

    def test_cell_type(self):
        engine = _engine(resolve(LEVELS[1]))
        assert engine.cell_type(55) is CellType.SNAKE
        assert engine.cell_type(15) is CellType.FOOD
        assert engine.cell_type(9) is CellType.BLOCKER
        assert engine.cell_type(44) is CellType.EMPTY

    def test_head_identity_and_rotation(self):
        engine = _running(resolve(LEVELS[0]))
        assert engine.is_head(55)
        assert not engine.is_head(54)
        engine.set_heading(Heading.UP)
        assert engine.head_rotation() == 90
        engine.set_heading(Heading.DOWN)
        assert engine.head_rotation() == 270
        engine.set_heading(Heading.LEFT)
        assert engine.head_rotation() == 0


class TestEnginePlacer:
    def test_custom_placer(self):
        placer = RandomPlacer(np.random.default_rng(9), max_attempts=3)
        engine = SnakeEngine(placer=placer)
        engine.reset(None)
        assert engine.placer is placer
        assert len(engine.body) == 3
