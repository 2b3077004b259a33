"""Tests for scoring rules and best-score persistence."""

import json

from soarscape.config import GameMode
from soarscape.entities import FlapObstacle
from soarscape.scoring import BestScoreStore, ScoreKeeper, best_score_key, flap_passes
from soarscape.track import ObstacleTrack


def _count_passes(start_xs, speed=4, ticks=800):
    track = ObstacleTrack(800, 600, speed)
    for x in start_xs:
        track.append(FlapObstacle(x=x, top_height=100, gap=175))
    per_tick = []
    for _ in range(ticks):
        track.advance()
        per_tick.append(flap_passes(track.obstacles, 150, speed))
    return per_tick


class TestFlapPasses:
    def test_each_obstacle_scores_once(self):
        per_tick = _count_passes([800])
        assert sum(per_tick) == 1
        assert max(per_tick) == 1

    def test_spacing_not_multiple_of_speed(self):
        """350 is not a multiple of 4; every obstacle still counts once."""
        per_tick = _count_passes([800, 1150, 1500, 1850, 2200], ticks=1000)
        assert sum(per_tick) == 5
        assert max(per_tick) == 1

    def test_window_is_half_open(self):
        obstacles = [FlapObstacle(x=70, top_height=100, gap=175)]
        assert flap_passes(obstacles, 150, 4) == 1
        obstacles = [FlapObstacle(x=74, top_height=100, gap=175)]
        assert flap_passes(obstacles, 150, 4) == 0
        obstacles = [FlapObstacle(x=69.5, top_height=100, gap=175)]
        assert flap_passes(obstacles, 150, 4) == 0


class TestScoreKeeper:
    def test_flap_displayed_equals_raw(self):
        score = ScoreKeeper()
        score.update(1)
        score.update(1)
        assert score.raw == 2
        assert score.displayed == 2

    def test_runner_divisor(self):
        score = ScoreKeeper(divisor=10)
        for _ in range(100):
            score.update(1)
        assert score.raw == 100
        assert score.displayed == 10

    def test_never_decreases(self):
        score = ScoreKeeper()
        score.update(3)
        score.update(-2)
        score.update(0)
        assert score.raw == 3

    def test_commit_new_best(self):
        store = BestScoreStore()
        score = ScoreKeeper(best=2)
        score.update(5)
        assert score.commit(store, GameMode.FLAP)
        assert score.best == 5
        assert store.get(GameMode.FLAP) == 5

    def test_commit_not_better(self):
        store = BestScoreStore()
        score = ScoreKeeper(best=7)
        score.update(7)
        assert not score.commit(store, GameMode.FLAP)
        assert store.get(GameMode.FLAP) == 0

    def test_best_uses_displayed(self):
        score = ScoreKeeper(divisor=10, best=5)
        for _ in range(59):
            score.update(1)
        assert not score.is_new_best
        score.update(1)
        assert score.is_new_best


class TestBestScoreStore:
    def test_key_format(self):
        assert best_score_key(GameMode.FLAP) == "bestScore_flap"
        assert best_score_key("runner") == "bestScore_runner"

    def test_missing_is_zero(self):
        assert BestScoreStore().get("flap") == 0

    def test_record_only_higher(self):
        store = BestScoreStore()
        assert store.record("flap", 4)
        assert not store.record("flap", 3)
        assert not store.record("flap", 4)
        assert store.get("flap") == 4

    def test_modes_are_separate(self):
        store = BestScoreStore()
        store.record("flap", 4)
        assert store.get("runner") == 0

    def test_persists_decimal_strings(self, tmp_path):
        path = tmp_path / "best.json"
        store = BestScoreStore(str(path))
        store.record(GameMode.RUNNER, 48)
        assert json.loads(path.read_text()) == {"bestScore_runner": "48"}
        assert BestScoreStore(str(path)).get(GameMode.RUNNER) == 48

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("not json")
        store = BestScoreStore(str(path))
        assert store.get("flap") == 0
        assert store.record("flap", 1)

    def test_non_decimal_value(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text(json.dumps({"bestScore_flap": "-3", "bestScore_runner": "abc"}))
        store = BestScoreStore(str(path))
        assert store.get("flap") == 0
        assert store.get("runner") == 0
