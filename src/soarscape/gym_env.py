"""Gymnasium environment wrapper for the arcade game.

Provides standard Gym API for RL training and scripted-policy rollouts.
One episode is one session: reset() starts a session, step() runs exactly
one tick, and the episode terminates on game over.
"""

import random
from typing import Any, Dict, Optional

import gymnasium
import numpy as np
import pygame
from gymnasium import spaces

from .config import Difficulty, GameConfig, GameMode, SessionSettings
from .engine import COLOR_DIM, draw_snapshot
from .entities import FlapObstacle
from .game import GameState, GameStateMachine, Snapshot
from .level_gen import LevelProvider, fetch_layout
from .scoring import BestScoreStore


STATE_DIM = 8

MODE_IDS = {
    GameMode.FLAP: 0,
    GameMode.RUNNER: 1,
}


def encode_snapshot(snapshot: Snapshot, progress: float = 0.0) -> np.ndarray:
    """Flatten a snapshot into the observation vector.

    Layout:
        [0] body position (top edge, screen y)
        [1] body velocity (positive = falling)
        [2] next obstacle x - anchor x
        [3] next obstacle top height (flap) / height (runner)
        [4] next obstacle gap (flap) / width (runner)
        [5] displayed score
        [6] episode progress (steps / max_steps)
        [7] mode id (0 flap, 1 runner)

    With no upcoming obstacle, slots 2-4 are 0.
    """
    state = np.zeros(STATE_DIM, dtype=np.float32)
    state[0] = snapshot.body_position
    state[1] = snapshot.body_velocity

    obstacle = snapshot.next_obstacle
    if obstacle is not None:
        state[2] = obstacle.x - snapshot.anchor_x
        if isinstance(obstacle, FlapObstacle):
            state[3] = obstacle.top_height
            state[4] = obstacle.gap
        else:
            state[3] = obstacle.height
            state[4] = obstacle.width

    state[5] = float(snapshot.score)
    state[6] = progress
    if snapshot.mode is not None:
        state[7] = float(MODE_IDS[snapshot.mode])
    return state


class ArcadeEnv(gymnasium.Env):
    """Gymnasium wrapper for one game mode.

    Observation space: float32 array of shape (8,), see encode_snapshot().

    Action space: Discrete(2), 1 = request a jump this tick.

    Reward = weighted sum of raw signals (stored in info['reward_signals']):
        alive: 1.0 every tick
        score: displayed score gained this tick
        death: 1.0 when the body dies
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        mode=GameMode.FLAP,
        difficulty=Difficulty.MEDIUM,
        render_mode: Optional[str] = None,
        max_episode_steps: int = 5000,
        reward_weights: Optional[Dict[str, float]] = None,
        level_provider: Optional[LevelProvider] = None,
        best_scores: Optional[BestScoreStore] = None,
    ):
        super().__init__()

        self.config = config or GameConfig()
        self.settings = SessionSettings(mode, difficulty)
        self.render_mode = render_mode
        self.max_episode_steps = max_episode_steps
        self.level_provider = level_provider
        # Shared across episodes so best_score spans every reset
        self.best_scores = best_scores if best_scores is not None else BestScoreStore()

        self.reward_weights = reward_weights or {
            "alive": 0.1,
            "score": 1.0,
            "death": -10.0,
        }

        self.action_space = spaces.Discrete(2)
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(STATE_DIM,), dtype=np.float32,
        )

        # Initialize pygame (caller sets SDL_VIDEODRIVER for headless)
        if not pygame.get_init():
            pygame.init()

        width, height = int(self.config.track_width), int(self.config.track_height)
        self._surface = pygame.Surface((width, height))
        self._display = None
        if self.render_mode == "human":
            self._display = pygame.display.set_mode((width, height))
            pygame.display.set_caption("SoarScape (env)")

        self.machine: Optional[GameStateMachine] = None
        self._episode_steps = 0
        self._prev_score = 0

    def reset(self, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)
        options = options or {}

        # Session randomness derives from the env's seeded generator
        rng = random.Random(int(self.np_random.integers(0, 2**31 - 1)))
        self.machine = GameStateMachine(self.config, best_scores=self.best_scores, rng=rng)

        layout = options.get("layout")
        if layout is None and self.settings.mode is GameMode.FLAP:
            layout = fetch_layout(
                self.level_provider, self.settings.difficulty, self.config.level_timeout
            )
        self.machine.start(self.settings, layout)

        self._episode_steps = 0
        self._prev_score = 0

        obs = self._get_obs()
        info = self._get_info()
        return obs, info

    def step(self, action):
        assert self.machine is not None, "Must call reset() before step()"

        if isinstance(action, np.ndarray):
            action = action.item()
        if int(action):
            self.machine.request_jump()

        outcome = self.machine.tick()
        self._episode_steps += 1

        snap = self.machine.snapshot()
        reward_signals = {
            "alive": 1.0 if outcome is not None else 0.0,
            "score": float(snap.score - self._prev_score),
            "death": 1.0 if outcome is not None and outcome.died else 0.0,
        }
        self._prev_score = snap.score
        reward = sum(
            self.reward_weights.get(k, 0.0) * v
            for k, v in reward_signals.items()
        )

        terminated = self.machine.state is GameState.GAME_OVER
        truncated = self._episode_steps >= self.max_episode_steps

        obs = self._get_obs()
        info = self._get_info()
        info["reward_signals"] = reward_signals

        if self.render_mode == "human":
            self.render()

        return obs, float(reward), terminated, truncated, info

    # ------------------------------------------------------------------
    # Observations
    # ------------------------------------------------------------------

    def _get_obs(self) -> np.ndarray:
        progress = float(self._episode_steps) / max(self.max_episode_steps, 1)
        return encode_snapshot(self.machine.snapshot(), progress)

    def _get_info(self) -> Dict[str, Any]:
        snap = self.machine.snapshot()
        return {
            "score": snap.score,
            "raw_score": snap.raw_score,
            "best_score": snap.best_score,
            "episode_steps": self._episode_steps,
            "ticks": snap.ticks,
            "mode": self.settings.mode.value,
            "difficulty": self.settings.difficulty.value,
            "death_cause": snap.death_cause,
        }

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_frame(self) -> np.ndarray:
        """Render current state to numpy array (H, W, 3) uint8."""
        draw_snapshot(self._surface, self.machine.snapshot())
        # surfarray gives (W, H, 3); transpose to (H, W, 3)
        array = pygame.surfarray.array3d(self._surface)
        return np.transpose(array, (1, 0, 2)).astype(np.uint8)

    def render(self):
        if self.machine is None:
            return None
        if self.render_mode == "rgb_array":
            return self._render_frame()
        elif self.render_mode == "human" and self._display:
            self._render_frame()
            self._display.blit(self._surface, (0, 0))
            self._draw_hud()
            pygame.display.flip()
        return None

    def _draw_hud(self):
        font = pygame.font.Font(None, 28)
        snap = self.machine.snapshot()
        text = font.render(f"Score: {snap.score}  |  Tick: {snap.ticks}", True, COLOR_DIM)
        self._display.blit(text, (10, 10))

    def close(self):
        if self._display:
            pygame.display.quit()
            self._display = None
