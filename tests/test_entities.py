"""Tests for obstacle records."""

from soarscape.entities import FlapObstacle, RunnerObstacle


class TestFlapObstacle:
    def test_edges(self):
        obstacle = FlapObstacle(x=800, top_height=150, gap=175)
        assert obstacle.width == 80
        assert obstacle.right == 880
        assert obstacle.gap_bottom == 325

    def test_gap_bounds(self):
        bb = FlapObstacle(x=800, top_height=150, gap=175).gap_bounds()
        assert (bb.left, bb.bottom, bb.right, bb.top) == (800, 150, 880, 325)

    def test_copy_is_independent(self):
        obstacle = FlapObstacle(x=800, top_height=150, gap=175, serial=3)
        clone = obstacle.copy()
        obstacle.x -= 4
        assert clone.x == 800
        assert clone.serial == 3


class TestRunnerObstacle:
    def test_bounds_are_ground_anchored(self):
        bb = RunnerObstacle(x=800, width=30, height=50).bounds(track_height=600)
        assert (bb.left, bb.bottom, bb.right, bb.top) == (800, 550, 830, 600)

    def test_right(self):
        assert RunnerObstacle(x=10, width=25, height=40).right == 35
