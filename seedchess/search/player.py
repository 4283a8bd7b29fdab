from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from typing import List, Optional, Tuple

from seedchess.assets.book import HistoryBook, open_book
from seedchess.engine.board import Board
from seedchess.engine.config import GameConfig, GameMode
from seedchess.engine.errors import AIBusyError, IllegalActionError, InvariantError
from seedchess.engine.game import Game
from seedchess.engine.move import Action
from seedchess.engine.piece import Color
from seedchess.engine.seeds import SeedRegistry
from seedchess.search.service import SearchResult, SearchService


logger = logging.getLogger(__name__)


class AIState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    DELAYING = "delaying"


class AIPlayer:
    """Runs the search off the event loop and applies its choice to a game.

    One request at a time: ``IDLE -> SEARCHING -> DELAYING -> IDLE``. The
    search runs in a worker thread on copies of the live state; the delay
    afterwards is cosmetic.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        service: Optional[SearchService] = None,
        book: Optional[HistoryBook] = None,
    ) -> None:
        self.config = config or GameConfig()
        if service is None:
            service = SearchService(book=book if book is not None else open_book())
        self.service = service
        self._state = AIState.IDLE
        self._lock = threading.Lock()
        self._cancel = threading.Event()
        self.last_result: Optional[SearchResult] = None

    @property
    def state(self) -> AIState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is not AIState.IDLE

    def cancel(self) -> None:
        """Ask a running search to stop; it raises ``SearchCancelled``."""
        self._cancel.set()

    def _set_state(self, state: AIState) -> None:
        logger.debug("ai state", extra={"from": self._state.value, "to": state.value})
        self._state = state

    def _check_turn(self, game: Game) -> None:
        if game.is_over:
            raise IllegalActionError("game is over")
        if game.pending_promotion is not None:
            raise IllegalActionError("promotion choice pending")
        if game.turn is not self.config.ai_color:
            raise IllegalActionError(f"it is not the AI's turn ({self.config.ai_color.value} plays)")

    def _snapshot(self, game: Game) -> Tuple[Board, SeedRegistry, Color, GameMode, List[str]]:
        # Taken on the caller's thread; the worker never sees live objects
        return game.board.copy(), game.seeds.clone(), self.config.ai_color, game.mode, list(game.history)

    def _run_search(
        self, board: Board, seeds: SeedRegistry, color: Color, mode: GameMode, history: List[str]
    ) -> SearchResult:
        return self.service.search(
            board, seeds, color, mode=mode, settings=self.config.ai, history=history, cancel=self._cancel
        )

    def choose_action(self, game: Game) -> Action:
        """Synchronous search for the AI's color, without applying.

        Raises:
            IllegalActionError: If it is not the AI's turn or the game is over.
            InvariantError: If the AI has no legal action.
        """
        self._check_turn(game)
        result = self._run_search(*self._snapshot(game))
        self.last_result = result
        if result.best_action is None:
            raise InvariantError("AI search found no action to play")
        return result.best_action

    async def request_action(self, game: Game, *, apply: bool = True) -> Action:
        """Search, wait the configured delay, then apply the chosen action.

        Args:
            game (Game): Game in which the AI plays ``config.ai_color``.
            apply (bool): Apply the action to ``game`` before returning.

        Returns:
            Action: The action chosen by the search or the opening book.

        Raises:
            AIBusyError: If a request is already in flight.
            IllegalActionError: If it is not the AI's turn or the game is over.
            InvariantError: If the AI has no legal action, or the game changed
                while the AI was thinking.
            SearchCancelled: If :meth:`cancel` was called mid-search.
        """
        with self._lock:
            if self._state is not AIState.IDLE:
                logger.warning("ai request rejected", extra={"state": self._state.value})
                raise AIBusyError("AI is already thinking")
            self._check_turn(game)
            self._set_state(AIState.SEARCHING)
        self._cancel.clear()
        try:
            snapshot = self._snapshot(game)
            history = snapshot[-1]
            result = await asyncio.to_thread(self._run_search, *snapshot)
            self.last_result = result
            if result.best_action is None:
                raise InvariantError("AI search found no action to play")
            self._set_state(AIState.DELAYING)
            await asyncio.sleep(self.config.ai.ai_thinking_delay_s)
            if game.history != history or game.turn is not self.config.ai_color:
                raise InvariantError("game changed while the AI was thinking")
            if apply:
                game.apply_action(result.best_action)
            return result.best_action
        finally:
            self._set_state(AIState.IDLE)
