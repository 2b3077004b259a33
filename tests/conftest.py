"""Pytest configuration and shared fixtures."""

import os

# Ensure headless pygame for all tests
os.environ['SDL_VIDEODRIVER'] = 'dummy'

import random

import pytest

from soarscape.config import GameConfig, SessionSettings
from soarscape.game import GameStateMachine
from soarscape.scheduler import FrameScheduler


@pytest.fixture
def game_config():
    """Default game configuration (800x600)."""
    return GameConfig()


@pytest.fixture
def compact_config():
    """800x400 track."""
    return GameConfig(track_width=800, track_height=400)


@pytest.fixture
def rng():
    """Seeded random source for reproducible procedural spawning."""
    return random.Random(1234)


@pytest.fixture
def machine(game_config, rng):
    """State machine in the Start state with its own scheduler."""
    return GameStateMachine(game_config, scheduler=FrameScheduler(), rng=rng)


@pytest.fixture
def flap_settings():
    return SessionSettings("flap", "medium")


@pytest.fixture
def runner_settings():
    return SessionSettings("runner", "medium")
