"""Session state, the simulation tick, and the Start/Playing/GameOver machine.

The tick is a function of an explicit SessionState plus one input (whether a
jump was requested since the last tick):

    GameStateMachine (if Playing)
      -> mode.integrate()          body: jump, velocity += g, position += v
      -> track.advance_and_spawn() obstacles: move, spawn, recycle
      -> mode.collision_test()     post-update overlap/bounds test
      -> score.update()            mode scoring rule
      -> transition to GameOver on death

GameStateMachine is the thin imperative shell around it: it owns the current
SessionState, latches jump requests, drives the scheduler and publishes an
immutable Snapshot after each tick for renderers and other readers.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .config import Difficulty, GameConfig, GameMode, SessionSettings, parse_mode
from .entities import Obstacle
from .level_gen import LevelLayoutCursor
from .modes import ModeStrategy, create_mode
from .physics import KinematicBody
from .scheduler import FrameScheduler
from .scoring import BestScoreStore, ScoreKeeper
from .track import ObstacleTrack


class GameState(Enum):
    START = "start"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class SessionState:
    """All mutable state of one session. Only tick() writes to it."""
    settings: SessionSettings
    strategy: ModeStrategy
    body: KinematicBody
    track: ObstacleTrack
    cursor: LevelLayoutCursor
    score: ScoreKeeper
    ticks: int = 0

    @classmethod
    def new(
        cls,
        config: GameConfig,
        settings: SessionSettings,
        layout: Any = None,
        best: int = 0,
        rng: Optional[random.Random] = None,
    ) -> "SessionState":
        """Fresh session: body centered/grounded, cursor at 0, score 0, initial queue.

        Args:
            config: Game configuration.
            settings: Mode and difficulty.
            layout: Layout for flap mode (LevelLayout, raw payload or None).
                Runner mode ignores it.
            best: Best displayed score for the mode.
            rng: Random source for procedural spawning.
        """
        strategy = create_mode(settings.mode, config, settings.difficulty, rng)
        cursor = LevelLayoutCursor(layout if settings.mode is GameMode.FLAP else None)
        track = strategy.create_track()
        strategy.populate(track, cursor)
        return cls(
            settings=settings,
            strategy=strategy,
            body=strategy.create_body(),
            track=track,
            cursor=cursor,
            score=ScoreKeeper(divisor=strategy.score_divisor, best=best),
        )


@dataclass(frozen=True)
class TickOutcome:
    """What one tick produced."""
    died: bool = False
    cause: Optional[str] = None  # "obstacle", "floor", "ceiling"
    passed: int = 0


def tick(session: SessionState, jump_requested: bool = False) -> TickOutcome:
    """Advance a session by exactly one step.

    Collision and scoring both see the post-update state. Scoring still runs
    on the tick that kills the body.
    """
    strategy = session.strategy
    strategy.integrate(session.body, jump_requested)
    session.track.advance_and_spawn(lambda track: strategy.spawn_policy(track, session.cursor))
    cause = strategy.collision_test(session.body, session.track)
    passed = strategy.score_rule(session.body, session.track)
    session.score.update(passed)
    session.ticks += 1
    return TickOutcome(died=cause is not None, cause=cause, passed=passed)


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of the game after a tick. Safe to read at any time."""
    state: GameState
    mode: Optional[GameMode] = None
    difficulty: Optional[Difficulty] = None
    track_width: float = 0.0
    track_height: float = 0.0
    body_position: float = 0.0
    body_velocity: float = 0.0
    body_size: float = 0.0
    anchor_x: float = 0.0
    obstacles: Tuple[Obstacle, ...] = field(default_factory=tuple)
    score: int = 0
    raw_score: int = 0
    best_score: int = 0
    ticks: int = 0
    death_cause: Optional[str] = None
    new_best: bool = False

    @property
    def next_obstacle(self) -> Optional[Obstacle]:
        """First obstacle whose trailing edge is still ahead of the body's left edge."""
        for obstacle in self.obstacles:
            if obstacle.x + obstacle.width > self.anchor_x:
                return obstacle
        return None

    @classmethod
    def of(cls, state: GameState, session: Optional[SessionState], **extra) -> "Snapshot":
        if session is None:
            return cls(state=state, **extra)
        body = session.body
        return cls(
            state=state,
            mode=session.settings.mode,
            difficulty=session.settings.difficulty,
            track_width=session.track.width,
            track_height=session.track.height,
            body_position=body.position,
            body_velocity=body.velocity,
            body_size=body.size,
            anchor_x=body.anchor_x,
            obstacles=tuple(o.copy() for o in session.track.obstacles),
            score=session.score.displayed,
            raw_score=session.score.raw,
            best_score=session.score.best,
            ticks=session.ticks,
            **extra,
        )


class GameStateMachine:
    """Start / Playing / GameOver around one SessionState at a time.

    Transitions:
        Start    -> Playing   start(settings, layout)
        Playing  -> GameOver  a tick reports a death
        GameOver -> Playing   restart() (same mode and difficulty, no layout)
        GameOver -> Start     to_menu()

    Commands that don't apply to the current state return False and change
    nothing.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        best_scores: Optional[BestScoreStore] = None,
        scheduler: Optional[FrameScheduler] = None,
        rng: Optional[random.Random] = None,
    ):
        """Create machine in the Start state.

        Args:
            config: Game configuration. Uses defaults if None.
            best_scores: Persistent best scores. In-memory per machine if None.
            scheduler: Tick scheduler, armed while Playing. A private one if None.
            rng: Random source for procedural spawning.
        """
        self.config = config or GameConfig()
        self.best_scores = best_scores
        self.scheduler = scheduler or FrameScheduler()
        self.rng = rng or random.Random()

        self.state = GameState.START
        self.settings: Optional[SessionSettings] = None
        self.session: Optional[SessionState] = None
        self.last_outcome: Optional[TickOutcome] = None
        self.new_best = False

        self._jump_pending = False
        self._best_by_mode: Dict[GameMode, int] = {}
        self._snapshot = Snapshot(state=self.state)

    # -- queries ------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.state is GameState.PLAYING

    def best_score(self, mode) -> int:
        """Best displayed score for a mode (stored, or seen by this machine)."""
        mode = parse_mode(mode)
        if self.best_scores is not None:
            return self.best_scores.get(mode)
        return self._best_by_mode.get(mode, 0)

    def snapshot(self) -> Snapshot:
        """Latest published snapshot."""
        return self._snapshot

    # -- commands -----------------------------------------------------------

    def start(self, settings: Optional[SessionSettings] = None, layout: Any = None) -> bool:
        """Start -> Playing with the chosen mode/difficulty and an already resolved layout."""
        if self.state is not GameState.START:
            return False
        self.settings = settings or SessionSettings()
        best = self.best_score(self.settings.mode)
        self._begin_session(layout, best)
        return True

    def restart(self) -> bool:
        """GameOver -> Playing, replaying the same settings with procedural obstacles."""
        if self.state is not GameState.GAME_OVER:
            return False
        self._begin_session(None, self.session.score.best)
        return True

    def to_menu(self) -> bool:
        """GameOver -> Start."""
        if self.state is not GameState.GAME_OVER:
            return False
        self.state = GameState.START
        self._publish()
        return True

    def request_jump(self) -> bool:
        """Latch a jump for the next tick. Ignored unless Playing."""
        if self.state is not GameState.PLAYING:
            return False
        self._jump_pending = True
        return True

    def tick(self) -> Optional[TickOutcome]:
        """Run one simulation step. No-op unless Playing."""
        if self.state is not GameState.PLAYING:
            return None
        jump, self._jump_pending = self._jump_pending, False
        outcome = tick(self.session, jump)
        self.last_outcome = outcome
        if outcome.died:
            self._game_over()
        self._publish()
        return outcome

    # -- internals ----------------------------------------------------------

    def _begin_session(self, layout: Any, best: int) -> None:
        self.session = SessionState.new(
            self.config, self.settings, layout=layout, best=best, rng=self.rng,
        )
        self.last_outcome = None
        self.new_best = False
        self._jump_pending = False
        self.state = GameState.PLAYING
        self._publish()
        self.scheduler.start(self.tick)

    def _game_over(self) -> None:
        self.state = GameState.GAME_OVER
        self.scheduler.stop()
        self._jump_pending = False
        mode = self.settings.mode
        self.new_best = self.session.score.commit(self.best_scores, mode)
        if self.new_best:
            self._best_by_mode[mode] = self.session.score.best

    def _publish(self) -> None:
        cause = self.last_outcome.cause if self.last_outcome else None
        self._snapshot = Snapshot.of(
            self.state, self.session, death_cause=cause, new_best=self.new_best,
        )
