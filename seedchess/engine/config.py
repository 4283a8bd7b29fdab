from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from .piece import Color


class GameMode(str, Enum):
    CLASSIC = "classic"
    SEED = "seed"


class AISettings(BaseModel):
    """Search tuning knobs, one value per session.

    Depth is chosen per mode because planting multiplies the branching factor
    in Seed Chess.
    """

    classic_depth: int = Field(default=4, ge=1, le=8)
    seed_depth: int = Field(default=3, ge=1, le=8)
    simulate_seed_hatching: bool = False
    seed_discount_base: float = Field(default=0.85, gt=0.0, lt=1.0)
    ai_thinking_delay_s: float = Field(default=0.5, ge=0.0)
    use_book: bool = True

    def depth_for(self, mode: GameMode) -> int:
        return self.seed_depth if mode is GameMode.SEED else self.classic_depth


class GameConfig(BaseModel):
    """Session-wide configuration, created once and passed explicitly."""

    mode: GameMode = GameMode.CLASSIC
    ai_color: Color = Color.BLACK
    ai: AISettings = Field(default_factory=AISettings)

    @property
    def is_seed(self) -> bool:
        return self.mode is GameMode.SEED

    def with_overrides(self, **overrides: Any) -> "GameConfig":
        """Return a copy with AI settings fields replaced (``None`` values skipped).

        Raises:
            pydantic.ValidationError: If an override violates a constraint.
        """
        ai_updates = {k: v for k, v in overrides.items() if v is not None}
        ai = AISettings.model_validate({**self.ai.model_dump(), **ai_updates})
        return self.model_copy(update={"ai": ai})


def load_config(path: Optional[Union[str, Path]] = None, **data: Any) -> GameConfig:
    """Build a GameConfig from an optional JSON file merged with keyword fields.

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist.
        pydantic.ValidationError: If the merged data violates a constraint.
    """
    raw: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(str(p))
        with open(p, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError("config file must hold a JSON object")
    raw.update(data)
    return GameConfig.model_validate(raw)
