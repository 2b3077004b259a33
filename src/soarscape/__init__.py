"""soarscape - arcade obstacle game with a flap mode and a runner mode.

Both variants share one per-tick simulation: kinematic integration of the
controlled body, obstacle spawning and recycling driven by a procedural or
externally supplied layout, collision and bounds detection, scoring, and a
Start/Playing/GameOver state machine. A pygame host plays it interactively
and a Gymnasium environment exposes it for RL and scripted rollouts.
"""

from .config import (
    GameMode, Difficulty, FlapConfig, RunnerConfig, SessionSettings, GameConfig,
    CONFIGS, get_preset,
)
from .physics import KinematicBody
from .entities import FlapObstacle, RunnerObstacle
from .level_gen import (
    ObstaclePattern, LevelLayout, LevelLayoutCursor, parse_layout,
    LevelProvider, StaticLevelProvider, FileLevelProvider, ProceduralLevelProvider,
    fetch_layout,
)
from .track import ObstacleTrack
from .collision import CollisionDetector
from .scoring import ScoreKeeper, BestScoreStore
from .modes import ModeStrategy, FlapMode, RunnerMode, create_mode
from .scheduler import FrameScheduler
from .game import GameState, SessionState, Snapshot, TickOutcome, GameStateMachine, tick

__all__ = [
    "GameMode",
    "Difficulty",
    "FlapConfig",
    "RunnerConfig",
    "SessionSettings",
    "GameConfig",
    "CONFIGS",
    "get_preset",
    "KinematicBody",
    "FlapObstacle",
    "RunnerObstacle",
    "ObstaclePattern",
    "LevelLayout",
    "LevelLayoutCursor",
    "parse_layout",
    "LevelProvider",
    "StaticLevelProvider",
    "FileLevelProvider",
    "ProceduralLevelProvider",
    "fetch_layout",
    "ObstacleTrack",
    "CollisionDetector",
    "ScoreKeeper",
    "BestScoreStore",
    "ModeStrategy",
    "FlapMode",
    "RunnerMode",
    "create_mode",
    "FrameScheduler",
    "GameState",
    "SessionState",
    "Snapshot",
    "TickOutcome",
    "GameStateMachine",
    "tick",
]
