from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from seedchess.engine.config import AISettings, GameConfig, GameMode, load_config
from seedchess.engine.piece import Color


def test_defaults() -> None:
    cfg = GameConfig()
    assert cfg.mode is GameMode.CLASSIC
    assert cfg.ai_color is Color.BLACK
    assert cfg.ai.classic_depth == 4 and cfg.ai.seed_depth == 3
    assert cfg.ai.simulate_seed_hatching is False
    assert cfg.ai.seed_discount_base == pytest.approx(0.85)
    assert cfg.ai.use_book is True


def test_depth_for_mode() -> None:
    ai = AISettings(classic_depth=5, seed_depth=2)
    assert ai.depth_for(GameMode.CLASSIC) == 5
    assert ai.depth_for(GameMode.SEED) == 2


@pytest.mark.parametrize(
    "fields",
    [{"classic_depth": 0}, {"seed_depth": 9}, {"seed_discount_base": 1.0}, {"ai_thinking_delay_s": -1}],
)
def test_invalid_settings_rejected(fields: dict) -> None:
    with pytest.raises(ValidationError):
        AISettings(**fields)


def test_with_overrides_skips_none() -> None:
    cfg = GameConfig(mode=GameMode.SEED)
    out = cfg.with_overrides(seed_depth=1, use_book=None)
    assert out.ai.seed_depth == 1
    assert out.ai.use_book is True
    assert out.mode is GameMode.SEED
    assert cfg.ai.seed_depth == 3


def test_load_config_merges_file_and_keywords(tmp_path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"mode": "seed", "ai_color": "white", "ai": {"seed_depth": 2}}))
    cfg = load_config(path, ai_color="black")
    assert cfg.is_seed
    assert cfg.ai_color is Color.BLACK
    assert cfg.ai.seed_depth == 2


def test_load_config_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.json")
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(path)
    with pytest.raises(ValidationError):
        load_config(mode="blitz")


@pytest.mark.parametrize("fields", [{"classic_depth": 0}, {"seed_depth": 9}, {"seed_discount_base": 1.5}])
def test_with_overrides_validates(fields: dict) -> None:
    with pytest.raises(ValidationError):
        GameConfig().with_overrides(**fields)
