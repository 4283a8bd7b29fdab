from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from ...engine.config import GameConfig
from ...engine.game import Game
from ...search.player import AIPlayer


@dataclass
class GameSession:
    """One local game against the AI."""

    game: Game
    player: AIPlayer


class InMemorySessionStore:
    """Thread-safe in-memory store of game sessions.

    Responsibilities:
    - Create sessions with unique ``game_id``s
    - Retrieve existing sessions by ``game_id``
    - Delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def create(self, config: GameConfig, player: Optional[AIPlayer] = None) -> str:
        """Start a new game for ``config`` and return its ``game_id``."""
        gid = str(uuid.uuid4())
        session = GameSession(game=Game.new(config), player=player or AIPlayer(config))
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
