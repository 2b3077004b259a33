"""Obstacles: barrier pairs (flap mode) and ground blocks (runner mode).

Obstacles are plain records; the ObstacleTrack moves them and the
CollisionDetector reads them. ``serial`` is unique within a session so a
recycled obstacle can be told apart from a newly spawned one.
"""

from dataclasses import dataclass, replace
from typing import Union

import pymunk

from .physics import box


@dataclass
class FlapObstacle:
    """Vertical barrier pair with a passable gap.

    The top barrier spans [0, top_height], the gap spans
    [top_height, top_height + gap] and the bottom barrier fills the rest.
    """
    x: float
    top_height: float
    gap: float
    width: float = 80.0
    serial: int = 0

    @property
    def right(self) -> float:
        """Trailing edge."""
        return self.x + self.width

    @property
    def gap_bottom(self) -> float:
        return self.top_height + self.gap

    def gap_bounds(self) -> pymunk.BB:
        """Passable region as a box."""
        return box(self.x, self.top_height, self.width, self.gap)

    def copy(self) -> "FlapObstacle":
        return replace(self)


@dataclass
class RunnerObstacle:
    """Ground-anchored block occupying [track_height - height, track_height]."""
    x: float
    width: float
    height: float
    serial: int = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    def copy(self) -> "RunnerObstacle":
        return replace(self)


Obstacle = Union[FlapObstacle, RunnerObstacle]
