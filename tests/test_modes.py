"""Tests for the flap and runner mode strategies."""

import random

import pytest

from soarscape.config import Difficulty, GameConfig, GameMode
from soarscape.entities import FlapObstacle, RunnerObstacle
from soarscape.level_gen import LevelLayoutCursor
from soarscape.modes import FlapMode, RunnerMode, create_mode


class TestCreateMode:
    def test_by_name(self):
        assert isinstance(create_mode("flap"), FlapMode)
        assert isinstance(create_mode(GameMode.RUNNER), RunnerMode)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_mode("swim")


class TestFlapMode:
    def _mode(self, config=None, difficulty=Difficulty.MEDIUM, seed=0):
        return FlapMode(config or GameConfig(), difficulty, random.Random(seed))

    def test_gap_per_difficulty(self):
        assert self._mode(difficulty=Difficulty.EASY).gap == 200
        assert self._mode(difficulty=Difficulty.MEDIUM).gap == 175
        assert self._mode(difficulty=Difficulty.HARD).gap == 150

    def test_body_starts_centered(self):
        body = self._mode().create_body()
        assert body.position == 300
        assert body.velocity == 0
        assert body.anchor_x == 150
        assert body.floor is None

    def test_procedural_initial_queue(self):
        config = GameConfig(track_width=800, track_height=400)
        mode = self._mode(config)
        track = mode.create_track()
        mode.populate(track, LevelLayoutCursor(None))
        assert [o.x for o in track] == [800, 1150, 1500, 1850, 2200]
        for obstacle in track:
            assert isinstance(obstacle, FlapObstacle)
            assert obstacle.gap == 175
            assert 50 <= obstacle.top_height <= 400 - 175 - 50

    def test_layout_drives_heights_and_spacing(self):
        cursor = LevelLayoutCursor({"obstacles": [
            {"position": 0, "height": 120, "spacing": 300},
            {"position": 300, "height": 90, "spacing": 400},
        ]})
        mode = self._mode()
        track = mode.create_track()
        mode.populate(track, cursor)
        assert [o.x for o in track] == [800, 1100, 1500, 1800, 2200]
        assert [o.top_height for o in track] == [120, 90, 120, 90, 120]

    def test_fallback_per_field(self):
        cursor = LevelLayoutCursor({"obstacles": [{"height": 0, "spacing": 250}]})
        mode = self._mode(GameConfig(track_height=400))
        track = mode.create_track()
        mode.populate(track, cursor)
        assert [o.x for o in track] == [800, 1050, 1300, 1550, 1800]
        for obstacle in track:
            assert 50 <= obstacle.top_height <= 175

    def test_spawns_when_trailing_on_screen(self):
        mode = self._mode()
        track = mode.create_track()
        track.append(FlapObstacle(x=800, top_height=100, gap=175))
        cursor = LevelLayoutCursor(None)

        mode.spawn_policy(track, cursor)
        assert len(track) == 1

        track.advance()
        mode.spawn_policy(track, cursor)
        assert [o.x for o in track] == [796, 1146]

    def test_spawns_into_empty_track(self):
        mode = self._mode()
        track = mode.create_track()
        mode.spawn_policy(track, LevelLayoutCursor(None))
        assert [o.x for o in track] == [800]

    def test_gap_constant_over_session(self):
        mode = self._mode(difficulty=Difficulty.HARD)
        track = mode.create_track()
        cursor = LevelLayoutCursor(None)
        mode.populate(track, cursor)
        for _ in range(3000):
            track.advance_and_spawn(lambda t: mode.spawn_policy(t, cursor))
            assert all(o.gap == 150 for o in track)
            xs = [o.x for o in track]
            assert xs == sorted(xs)

    def test_jump_allowed_mid_air(self):
        mode = self._mode()
        body = mode.create_body()
        mode.integrate(body, jump_requested=False)
        mode.integrate(body, jump_requested=True)
        assert body.velocity == pytest.approx(-7.5)


class TestRunnerMode:
    def _mode(self, seed=0):
        return RunnerMode(GameConfig(), Difficulty.MEDIUM, random.Random(seed))

    def test_body_grounded(self):
        body = self._mode().create_body()
        assert body.position == 560
        assert body.is_grounded

    def test_initial_queue(self):
        mode = self._mode()
        track = mode.create_track()
        mode.populate(track, LevelLayoutCursor(None))
        assert len(track) == 1
        block = track.trailing
        assert isinstance(block, RunnerObstacle)
        assert block.x == 800
        assert 20 <= block.width <= 40
        assert 40 <= block.height <= 70
        assert 800 - 700 <= track.spawn_threshold <= 800 - 300

    def test_spawn_waits_for_threshold(self):
        mode = self._mode()
        track = mode.create_track()
        mode.populate(track, LevelLayoutCursor(None))
        threshold = track.spawn_threshold
        while len(track) == 1:
            track.advance_and_spawn(lambda t: mode.spawn_policy(t, None))
        assert track.obstacles[0].x < threshold
        assert track.obstacles[0].x + track.speed >= threshold
        assert track.trailing.x == 800

    def test_ignores_layout(self):
        mode = self._mode()
        track = mode.create_track()
        cursor = LevelLayoutCursor({"obstacles": [{"height": 10, "spacing": 10}]})
        mode.populate(track, cursor)
        assert cursor.index == 0

    def test_jump_only_when_grounded(self):
        mode = self._mode()
        body = mode.create_body()
        mode.integrate(body, jump_requested=True)
        assert body.velocity == pytest.approx(-11.4)
        mode.integrate(body, jump_requested=True)
        assert body.velocity == pytest.approx(-10.8)

    def test_score_per_tick(self):
        mode = self._mode()
        assert mode.score_divisor == 10
        assert mode.score_rule(mode.create_body(), mode.create_track()) == 1
