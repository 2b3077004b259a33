"""Game mode strategies: how each variant moves, spawns, collides and scores.

Both variants run the same tick; everything that differs between them sits
behind four hooks on a ModeStrategy:

- integrate(body, jump_requested): apply a jump if allowed, then one
  semi-implicit Euler step
- spawn_policy(track): append obstacles after the track advanced
- collision_test(body, track): death cause or None
- score_rule(body, track): points earned this tick

Strategies hold only per-session constants (track size, gap for the
difficulty, random source); all mutable state lives in the SessionState.
"""

import random
from typing import Optional

from .config import Difficulty, FlapConfig, GameConfig, GameMode, RunnerConfig, parse_mode
from .collision import CollisionDetector
from .entities import FlapObstacle, RunnerObstacle
from .level_gen import LevelLayoutCursor
from .physics import KinematicBody
from .scoring import flap_passes
from .track import ObstacleTrack


class ModeStrategy:
    """Base strategy. Subclasses implement the four per-tick hooks."""

    mode: GameMode

    def __init__(
        self,
        config: GameConfig,
        difficulty: Difficulty,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.track_width = config.track_width
        self.track_height = config.track_height
        self.detector = CollisionDetector(config.track_height)

    @property
    def params(self):
        """Mode constants (FlapConfig or RunnerConfig)."""
        raise NotImplementedError

    @property
    def score_divisor(self) -> int:
        return 1

    def create_body(self) -> KinematicBody:
        raise NotImplementedError

    def create_track(self) -> ObstacleTrack:
        return ObstacleTrack(self.track_width, self.track_height, self.params.obstacle_speed)

    def populate(self, track: ObstacleTrack, cursor: LevelLayoutCursor) -> None:
        """Fill the initial queue at session start."""
        raise NotImplementedError

    def integrate(self, body: KinematicBody, jump_requested: bool) -> None:
        if jump_requested:
            body.jump(self.params.jump_impulse)
        body.integrate(self.params.gravity)

    def spawn_policy(self, track: ObstacleTrack, cursor: LevelLayoutCursor) -> None:
        raise NotImplementedError

    def collision_test(self, body: KinematicBody, track: ObstacleTrack) -> Optional[str]:
        raise NotImplementedError

    def score_rule(self, body: KinematicBody, track: ObstacleTrack) -> int:
        raise NotImplementedError


class FlapMode(ModeStrategy):
    """Falling body, barrier pairs with a gap, layout-driven spawning."""

    mode = GameMode.FLAP

    def __init__(self, config, difficulty, rng=None):
        super().__init__(config, difficulty, rng)
        self.gap = self.params.gap_for(difficulty)

    @property
    def params(self) -> FlapConfig:
        return self.config.flap

    def create_body(self) -> KinematicBody:
        return KinematicBody(
            anchor_x=self.params.anchor_x,
            size=self.params.body_size,
            position=self.track_height / 2,
        )

    def _random_top_height(self) -> float:
        margin = self.params.top_margin
        return self.rng.uniform(margin, self.track_height - self.gap - margin)

    def _next_shape(self, cursor: LevelLayoutCursor):
        """Draw (top_height, spacing) from the layout, falling back per field."""
        pattern = cursor.next()
        top_height = pattern.height if pattern is not None else None
        spacing = pattern.spacing if pattern is not None else None
        if not top_height:
            top_height = self._random_top_height()
        if not spacing:
            spacing = self.params.default_spacing
        return top_height, spacing

    def _append_pair(self, track: ObstacleTrack, x: float, top_height: float) -> None:
        track.append(FlapObstacle(
            x=x,
            top_height=top_height,
            gap=self.gap,
            width=self.params.obstacle_width,
            serial=track.next_serial(),
        ))

    def populate(self, track: ObstacleTrack, cursor: LevelLayoutCursor) -> None:
        x = float(self.track_width)
        for _ in range(self.params.initial_obstacles):
            top_height, spacing = self._next_shape(cursor)
            self._append_pair(track, x, top_height)
            x += spacing

    def spawn_policy(self, track: ObstacleTrack, cursor: LevelLayoutCursor) -> None:
        """Append one pair behind the trailing one once it is on screen."""
        trailing = track.trailing
        if trailing is None:
            top_height, _ = self._next_shape(cursor)
            self._append_pair(track, float(self.track_width), top_height)
        elif trailing.x < self.track_width:
            # One pattern decides both the new pair's height and its distance
            top_height, spacing = self._next_shape(cursor)
            self._append_pair(track, trailing.x + spacing, top_height)

    def collision_test(self, body, track) -> Optional[str]:
        return self.detector.check_flap(body, track.obstacles)

    def score_rule(self, body, track) -> int:
        return flap_passes(track.obstacles, body.anchor_x, track.speed)


class RunnerMode(ModeStrategy):
    """Grounded body, ground blocks, randomized spacing, time-based score."""

    mode = GameMode.RUNNER

    @property
    def params(self) -> RunnerConfig:
        return self.config.runner

    @property
    def score_divisor(self) -> int:
        return self.params.score_divisor

    def create_body(self) -> KinematicBody:
        floor = self.track_height - self.params.body_size
        return KinematicBody(
            anchor_x=self.params.anchor_x,
            size=self.params.body_size,
            position=floor,
            floor=floor,
        )

    def _spawn_block(self, track: ObstacleTrack) -> None:
        p = self.params
        track.append(RunnerObstacle(
            x=float(self.track_width),
            width=self.rng.uniform(*p.obstacle_width_range),
            height=self.rng.uniform(*p.obstacle_height_range),
            serial=track.next_serial(),
        ))
        # Distance the new block must travel before the next one may spawn
        track.spawn_threshold = self.track_width - (
            p.min_spacing + self.rng.uniform(0.0, p.spacing_jitter)
        )

    def populate(self, track: ObstacleTrack, cursor: LevelLayoutCursor) -> None:
        for _ in range(self.params.initial_obstacles):
            self._spawn_block(track)

    def integrate(self, body: KinematicBody, jump_requested: bool) -> None:
        # Jumps only leave the ground; requests in the air are dropped
        super().integrate(body, jump_requested and body.is_grounded)

    def spawn_policy(self, track: ObstacleTrack, cursor: LevelLayoutCursor) -> None:
        trailing = track.trailing
        if trailing is None or trailing.x < track.spawn_threshold:
            self._spawn_block(track)

    def collision_test(self, body, track) -> Optional[str]:
        return self.detector.check_runner(body, track.obstacles)

    def score_rule(self, body, track) -> int:
        return 1


def create_mode(
    mode,
    config: Optional[GameConfig] = None,
    difficulty: Difficulty = Difficulty.MEDIUM,
    rng: Optional[random.Random] = None,
) -> ModeStrategy:
    """Factory: build the strategy for a mode tag or name."""
    classes = {
        GameMode.FLAP: FlapMode,
        GameMode.RUNNER: RunnerMode,
    }
    cls = classes[parse_mode(mode)]
    return cls(config or GameConfig(), difficulty, rng)
