"""Obstacle track: the live obstacle queue for one session.

The queue is kept in ascending ``x`` order: new obstacles are only ever
appended behind the trailing one, every obstacle moves by the same amount
each tick, and recycling only removes entries. What to spawn and when is
decided by the mode's spawn policy; the track only owns the queue.
"""

from typing import Callable, List, Optional

from .entities import Obstacle


class ObstacleTrack:
    """Live obstacle queue, scrolled right-to-left at a fixed speed."""

    def __init__(self, width: float, height: float, speed: float):
        """Create an empty track.

        Args:
            width: Track width W. Obstacles enter at or beyond x = W.
            height: Track height H.
            speed: Horizontal displacement per tick.
        """
        self.width = width
        self.height = height
        self.speed = speed

        self.obstacles: List[Obstacle] = []
        self._next_serial = 0

        # Runner mode: trailing obstacle must pass this x before the next spawn
        self.spawn_threshold: Optional[float] = None

    @property
    def trailing(self) -> Optional[Obstacle]:
        """Most recently appended obstacle."""
        return self.obstacles[-1] if self.obstacles else None

    def __len__(self) -> int:
        return len(self.obstacles)

    def __iter__(self):
        return iter(self.obstacles)

    def next_serial(self) -> int:
        serial = self._next_serial
        self._next_serial += 1
        return serial

    def append(self, obstacle: Obstacle) -> Obstacle:
        """Add an obstacle behind the trailing one."""
        trailing = self.trailing
        if trailing is not None and obstacle.x < trailing.x:
            raise ValueError(
                f"Obstacle at x={obstacle.x} would be ahead of trailing x={trailing.x}"
            )
        self.obstacles.append(obstacle)
        return obstacle

    def advance(self) -> None:
        """Move every obstacle left by one tick's displacement."""
        for obstacle in self.obstacles:
            obstacle.x -= self.speed

    def recycle(self) -> List[Obstacle]:
        """Drop obstacles fully past the leading edge (x + width < 0)."""
        kept = []
        dropped = []
        for obstacle in self.obstacles:
            if obstacle.x + obstacle.width < 0:
                dropped.append(obstacle)
            else:
                kept.append(obstacle)
        self.obstacles = kept
        return dropped

    def advance_and_spawn(self, spawn_policy: Callable[["ObstacleTrack"], None]) -> List[Obstacle]:
        """One tick of track motion: advance, spawn, recycle.

        Args:
            spawn_policy: Called with the track after advancing; appends
                whatever the mode wants spawned this tick.

        Returns:
            Obstacles recycled this tick.
        """
        self.advance()
        spawn_policy(self)
        return self.recycle()

    def clear(self) -> None:
        self.obstacles = []
        self._next_serial = 0
        self.spawn_threshold = None
