"""Configuration system for the arcade obstacle game.

Two game variants share one simulation loop:
- Flap mode: a continuously falling body kept aloft by discrete upward
  impulses, threading gaps between paired top/bottom barriers.
- Runner mode: a grounded body that hops over ground obstacles; score is
  time-based.

All distances are in track units (pixels) and all rates are per tick, so a
tick is the only unit of time the simulation knows about.

This design separates:
- Mode constants (how each variant moves and spawns) - FlapConfig / RunnerConfig
- Track and host settings (size, frame rate, persistence) - GameConfig
- Per-session choices (mode, difficulty) - SessionSettings
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Tuple, Dict, Any, ClassVar, Optional
import copy
import random


class GameMode(Enum):
    """Variant tag. Selected once per session, immutable during play."""
    FLAP = "flap"
    RUNNER = "runner"


class Difficulty(Enum):
    """Session difficulty. Maps to a gap reduction in track units."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def gap_delta(self) -> float:
        return DIFFICULTY_GAP_DELTA[self]


DIFFICULTY_GAP_DELTA: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 25.0,
    Difficulty.HARD: 50.0,
}


def parse_mode(value) -> GameMode:
    """Accept a GameMode or its name ("flap", "RUNNER", ...)."""
    if isinstance(value, GameMode):
        return value
    try:
        return GameMode(str(value).lower())
    except ValueError:
        raise ValueError(f"Unknown game mode: {value}") from None


def parse_difficulty(value) -> Difficulty:
    """Accept a Difficulty or its name ("easy", "Hard", ...)."""
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value).lower())
    except ValueError:
        raise ValueError(f"Unknown difficulty: {value}") from None


@dataclass
class FlapConfig:
    """Flap mode constants.

    The body falls under constant gravity and each jump overwrites its
    velocity with an upward impulse (negative = up, screen coordinates).
    Obstacles are barrier pairs of fixed width with a passable gap of
    ``base_gap - difficulty delta``.
    """

    body_size: float = 40.0
    gravity: float = 0.5  # Track units per tick^2, positive = down
    jump_impulse: float = -8.0  # Velocity after a jump (up is negative)
    anchor_x: float = 150.0  # Fixed horizontal position of the body's left edge

    obstacle_width: float = 80.0
    obstacle_speed: float = 4.0  # Track units per tick
    base_gap: float = 200.0
    default_spacing: float = 350.0  # Used when the layout has no spacing hint
    top_margin: float = 50.0  # Procedural topHeight stays this far from both edges
    initial_obstacles: int = 5

    def gap_for(self, difficulty: Difficulty) -> float:
        """Passable gap height for a session at this difficulty."""
        return self.base_gap - difficulty.gap_delta

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FlapConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class RunnerConfig:
    """Runner mode constants.

    The body sits on the ground at ``track_height - body_size`` and may only
    jump while grounded. Obstacles are ground-anchored boxes with randomized
    size and randomized spacing.
    """

    body_size: float = 40.0
    gravity: float = 0.6
    jump_impulse: float = -12.0
    anchor_x: float = 50.0

    obstacle_speed: float = 6.0
    obstacle_width_range: Tuple[float, float] = (20.0, 40.0)
    obstacle_height_range: Tuple[float, float] = (40.0, 70.0)
    min_spacing: float = 300.0  # Trailing obstacle must be this far in before the next spawns
    spacing_jitter: float = 400.0  # Plus uniform(0, spacing_jitter)
    initial_obstacles: int = 1
    score_divisor: int = 10  # Displayed score = raw ticks // score_divisor

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["obstacle_width_range"] = list(self.obstacle_width_range)
        d["obstacle_height_range"] = list(self.obstacle_height_range)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RunnerConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        for key in ("obstacle_width_range", "obstacle_height_range"):
            if key in known:
                known[key] = tuple(known[key])
        return cls(**known)


@dataclass
class SessionSettings:
    """What the player picks on the start screen."""
    mode: GameMode = GameMode.FLAP
    difficulty: Difficulty = Difficulty.MEDIUM

    def __post_init__(self):
        self.mode = parse_mode(self.mode)
        self.difficulty = parse_difficulty(self.difficulty)

    def to_dict(self) -> Dict[str, str]:
        return {"mode": self.mode.value, "difficulty": self.difficulty.value}


@dataclass
class GameConfig:
    """Complete game configuration combining both variants and the track."""
    flap: FlapConfig = field(default_factory=FlapConfig)
    runner: RunnerConfig = field(default_factory=RunnerConfig)

    # Track (the visible playfield); the simulation uses these as W and H
    track_width: int = 800
    track_height: int = 600
    fps: int = 60

    # Host settings (not used by the tick)
    best_score_path: Optional[str] = None
    level_timeout: float = 10.0  # Seconds to wait for a layout before going procedural

    TRACK_WIDTH_RANGE: ClassVar[Tuple[int, int]] = (600, 1200)
    TRACK_HEIGHT_RANGE: ClassVar[Tuple[int, int]] = (400, 800)

    @classmethod
    def sample_track(cls) -> "GameConfig":
        """Sample a track size with default mode constants."""
        return cls(
            track_width=random.randint(*cls.TRACK_WIDTH_RANGE),
            track_height=random.randint(*cls.TRACK_HEIGHT_RANGE),
        )

    def mode_config(self, mode: GameMode):
        """Constants for the given variant."""
        return self.flap if parse_mode(mode) is GameMode.FLAP else self.runner

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary."""
        return {
            "flap": self.flap.to_dict(),
            "runner": self.runner.to_dict(),
            "track_width": self.track_width,
            "track_height": self.track_height,
            "fps": self.fps,
            "best_score_path": self.best_score_path,
            "level_timeout": self.level_timeout,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameConfig":
        return cls(
            flap=FlapConfig.from_dict(d.get("flap", {})),
            runner=RunnerConfig.from_dict(d.get("runner", {})),
            track_width=d.get("track_width", 800),
            track_height=d.get("track_height", 600),
            fps=d.get("fps", 60),
            best_score_path=d.get("best_score_path"),
            level_timeout=d.get("level_timeout", 10.0),
        )


# Predefined configurations for play/testing
CONFIGS = {
    # Default window
    "default": GameConfig(),

    # Short track - less room between the barrier pairs
    "compact": GameConfig(track_width=800, track_height=400),

    # Wide screen - more obstacles visible at once
    "wide": GameConfig(track_width=1280, track_height=720),

    # Slow and forgiving for both variants
    "gentle": GameConfig(
        flap=FlapConfig(gravity=0.35, jump_impulse=-7.0, obstacle_speed=3.0, base_gap=240.0),
        runner=RunnerConfig(gravity=0.5, jump_impulse=-11.0, obstacle_speed=5.0, min_spacing=400.0),
    ),

    # Fast: same geometry, higher speed
    "frantic": GameConfig(
        flap=FlapConfig(obstacle_speed=6.0, default_spacing=300.0),
        runner=RunnerConfig(obstacle_speed=9.0, gravity=0.9, jump_impulse=-15.0),
    ),
}


def get_preset(name: str) -> GameConfig:
    """Look up a preset by name."""
    if name not in CONFIGS:
        raise ValueError(f"Unknown preset: {name}")
    return copy.deepcopy(CONFIGS[name])
