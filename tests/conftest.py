import os
import sys

import pytest


# Ensure the repository root is on sys.path for `from seedchess...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from seedchess.engine.config import AISettings, GameConfig, GameMode  # noqa: E402


@pytest.fixture
def classic_config() -> GameConfig:
    return GameConfig(mode=GameMode.CLASSIC, ai=AISettings(ai_thinking_delay_s=0.0))


@pytest.fixture
def seed_config() -> GameConfig:
    return GameConfig(mode=GameMode.SEED, ai=AISettings(ai_thinking_delay_s=0.0))
