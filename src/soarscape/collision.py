"""Per-tick collision and bounds tests between the body and the track.

All tests run on post-update values: the body has already been integrated
and the obstacles already advanced when check() is called.

Flap mode: the body must stay inside the active obstacle's gap and inside
[0, H - size] vertically. Runner mode: the body's bottom edge must be above
the active obstacle's top while they overlap horizontally.
"""

from typing import Iterable, Optional

from .entities import FlapObstacle, Obstacle, RunnerObstacle
from .physics import KinematicBody, box, spans_overlap


# Death causes reported in TickOutcome.cause
CAUSE_OBSTACLE = "obstacle"
CAUSE_FLOOR = "floor"
CAUSE_CEILING = "ceiling"


def active_obstacle(
    obstacles: Iterable[Obstacle], anchor_x: float, size: float
) -> Optional[Obstacle]:
    """First obstacle whose horizontal span strictly overlaps [anchor_x, anchor_x + size]."""
    for obstacle in obstacles:
        if spans_overlap(obstacle.x, obstacle.width, anchor_x, size):
            return obstacle
    return None


def hits_barrier(body: KinematicBody, obstacle: FlapObstacle) -> bool:
    """Whether the body sticks out of the gap (above top_height or below the gap).

    Touching the gap's edges is safe.
    """
    gap = obstacle.gap_bounds()
    # Only the vertical extent matters; line the gap up with the body horizontally
    gap_column = box(body.anchor_x, gap.bottom, body.size, gap.top - gap.bottom)
    return not gap_column.contains(body.bounds)


def out_of_bounds(body: KinematicBody, track_height: float) -> Optional[str]:
    """Floor/ceiling test for free-flying bodies."""
    if body.position < 0:
        return CAUSE_CEILING
    if body.position > track_height - body.size:
        return CAUSE_FLOOR
    return None


def hits_block(body: KinematicBody, obstacle: RunnerObstacle, track_height: float) -> bool:
    """Whether the body has not cleared the block's top."""
    return body.bottom > track_height - obstacle.height


class CollisionDetector:
    """Collision/bounds checks for one track."""

    def __init__(self, track_height: float):
        self.track_height = track_height

    def check_flap(self, body: KinematicBody, obstacles: Iterable[Obstacle]) -> Optional[str]:
        """Return the death cause for a flap-mode body, or None."""
        cause = out_of_bounds(body, self.track_height)
        if cause is not None:
            return cause
        active = active_obstacle(obstacles, body.anchor_x, body.size)
        if active is not None and hits_barrier(body, active):
            return CAUSE_OBSTACLE
        return None

    def check_runner(self, body: KinematicBody, obstacles: Iterable[Obstacle]) -> Optional[str]:
        """Return the death cause for a runner-mode body, or None."""
        active = active_obstacle(obstacles, body.anchor_x, body.size)
        if active is not None and hits_block(body, active, self.track_height):
            return CAUSE_OBSTACLE
        return None
