"""Scripted policies for automated rollouts.

Each policy takes an observation vector from ArcadeEnv (see
gym_env.encode_snapshot) and returns a Discrete(2) action:
1 to request a jump this tick, 0 otherwise.
"""

import numpy as np
from typing import Optional


class BasePolicy:
    """Base class for scripted policies."""

    name: str = "base"

    def __call__(self, obs: np.ndarray) -> int:
        return self.act(obs)

    def act(self, obs: np.ndarray) -> int:
        raise NotImplementedError

    def reset(self):
        """Called at the start of each episode."""
        pass


class RandomPolicy(BasePolicy):
    """Jump with a fixed probability each tick.

    Works in either mode, dies quickly, good baseline.
    """

    name = "random"

    def __init__(self, jump_probability: float = 0.1, rng: Optional[np.random.Generator] = None):
        self.jump_probability = jump_probability
        self.rng = rng or np.random.default_rng()

    def act(self, obs):
        return int(self.rng.random() < self.jump_probability)


class GapSeekingPolicy(BasePolicy):
    """Flap mode: flap whenever the body falls toward the bottom of the next gap.

    The target line sits ``margin`` above the gap's lower edge. Without an
    upcoming obstacle the body holds the middle of the track.
    """

    name = "gap_seeking"

    def __init__(self, body_size: float = 40.0, margin: float = 10.0, track_height: float = 600.0):
        self.body_size = body_size
        self.margin = margin
        self.track_height = track_height

    def act(self, obs):
        position, velocity = obs[0], obs[1]
        top_height, gap = obs[3], obs[4]

        if gap > 0:
            target = top_height + gap - self.margin
        else:
            target = (self.track_height + self.body_size) / 2

        falling = velocity >= 0
        return int(falling and position + self.body_size >= target)


class ObstacleHopPolicy(BasePolicy):
    """Runner mode: jump once the next block is within the lead distance.

    Jumps while airborne are dropped by the game, so repeating the request
    until landing is harmless.
    """

    name = "obstacle_hop"

    def __init__(self, lead_distance: float = 120.0):
        self.lead_distance = lead_distance

    def act(self, obs):
        dx, height = obs[2], obs[3]
        return int(height > 0 and 0 < dx <= self.lead_distance)


POLICIES = {
    "random": RandomPolicy,
    "gap_seeking": GapSeekingPolicy,
    "obstacle_hop": ObstacleHopPolicy,
}
