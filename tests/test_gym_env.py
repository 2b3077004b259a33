"""Tests for the Gymnasium environment wrapper."""

import json

import numpy as np
import pytest

from soarscape.config import GameConfig
from soarscape.game import GameState, Snapshot
from soarscape.gym_env import STATE_DIM, ArcadeEnv, encode_snapshot
from soarscape.level_gen import StaticLevelProvider
from soarscape.scoring import BestScoreStore


@pytest.fixture
def env():
    e = ArcadeEnv(max_episode_steps=500)
    yield e
    e.close()


class TestArcadeEnvCreation:
    def test_spaces(self, env):
        assert env.action_space.n == 2
        assert env.observation_space.shape == (STATE_DIM,)
        assert env.observation_space.dtype == np.float32

    def test_settings_by_name(self):
        e = ArcadeEnv(mode="runner", difficulty="hard")
        assert e.settings.mode.value == "runner"
        assert e.settings.difficulty.value == "hard"
        e.close()


class TestArcadeEnvReset:
    def test_reset_returns_obs_and_info(self, env):
        obs, info = env.reset(seed=42)
        assert obs.shape == (STATE_DIM,)
        assert obs.dtype == np.float32
        assert env.observation_space.contains(obs)
        assert info["score"] == 0
        assert info["mode"] == "flap"

    def test_flap_observation(self, env):
        obs, _ = env.reset(seed=42)
        assert obs[0] == 300
        assert obs[1] == 0
        assert obs[2] == 800 - 150
        assert obs[4] == 175
        assert obs[7] == 0

    def test_runner_observation(self):
        e = ArcadeEnv(mode="runner")
        obs, _ = e.reset(seed=1)
        assert obs[0] == 560
        assert obs[2] == 800 - 50
        assert 40 <= obs[3] <= 70
        assert 20 <= obs[4] <= 40
        assert obs[7] == 1
        e.close()

    def test_same_seed_same_episode(self):
        a, b = ArcadeEnv(), ArcadeEnv()
        obs_a, _ = a.reset(seed=7)
        obs_b, _ = b.reset(seed=7)
        np.testing.assert_array_equal(obs_a, obs_b)
        heights_a = [o.top_height for o in a.machine.snapshot().obstacles]
        heights_b = [o.top_height for o in b.machine.snapshot().obstacles]
        assert heights_a == heights_b
        a.close()
        b.close()

    def test_layout_from_provider(self):
        layout = json.dumps({"obstacles": [{"position": 0, "height": 111, "spacing": 320}]})
        e = ArcadeEnv(level_provider=StaticLevelProvider(layout))
        obs, _ = e.reset(seed=0)
        assert obs[3] == 111
        e.close()

    def test_layout_option_overrides(self, env):
        obs, _ = env.reset(seed=0, options={"layout": {"obstacles": [{"height": 99}]}})
        assert obs[3] == 99


class TestArcadeEnvStep:
    def test_step_signature(self, env):
        env.reset(seed=0)
        obs, reward, terminated, truncated, info = env.step(0)
        assert obs.shape == (STATE_DIM,)
        assert isinstance(reward, float)
        assert not terminated
        assert not truncated
        assert info["reward_signals"] == {"alive": 1.0, "score": 0.0, "death": 0.0}

    def test_jump_action(self, env):
        env.reset(seed=0)
        obs, *_ = env.step(np.array(1))
        assert obs[1] == pytest.approx(-7.5)

    def test_falls_and_terminates(self, env):
        env.reset(seed=0)
        for step in range(1, 100):
            _, reward, terminated, _, info = env.step(0)
            if terminated:
                break
        assert step == 32
        assert info["reward_signals"]["death"] == 1.0
        assert info["death_cause"] == "floor"
        assert reward == pytest.approx(0.1 - 10.0)
        assert env.machine.state is GameState.GAME_OVER

    def test_truncation(self):
        e = ArcadeEnv(mode="runner", max_episode_steps=50)
        e.reset(seed=0)
        for _ in range(50):
            _, _, terminated, truncated, _ = e.step(0)
        assert truncated
        assert not terminated
        e.close()

    def test_best_score_spans_episodes(self):
        store = BestScoreStore()
        e = ArcadeEnv(mode="runner", best_scores=store)
        e.reset(seed=0)
        terminated = False
        while not terminated:
            _, _, terminated, _, info = e.step(0)
        assert info["score"] == 11
        assert info["best_score"] == 11

        _, info = e.reset(seed=1)
        assert info["score"] == 0
        assert info["best_score"] == 11
        assert store.get("runner") == 11
        e.close()

    def test_custom_reward_weights(self):
        e = ArcadeEnv(reward_weights={"alive": 2.0})
        e.reset(seed=0)
        _, reward, *_ = e.step(0)
        assert reward == 2.0
        e.close()


class TestArcadeEnvRender:
    def test_rgb_array(self):
        e = ArcadeEnv(render_mode="rgb_array", config=GameConfig(track_width=400, track_height=300))
        e.reset(seed=0)
        frame = e.render()
        assert frame.shape == (300, 400, 3)
        assert frame.dtype == np.uint8
        e.close()

    def test_render_before_reset(self):
        e = ArcadeEnv(render_mode="rgb_array")
        assert e.render() is None
        e.close()


class TestEncodeSnapshot:
    def test_start_snapshot_is_zero(self):
        state = encode_snapshot(Snapshot(state=GameState.START))
        assert not state.any()

    def test_progress_slot(self):
        state = encode_snapshot(Snapshot(state=GameState.START), progress=0.25)
        assert state[6] == pytest.approx(0.25)
