from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from seedchess.assets.book import HistoryBook
from seedchess.engine import rules
from seedchess.engine.board import Board
from seedchess.engine.config import AISettings, GameMode
from seedchess.engine.errors import SearchCancelled
from seedchess.engine.move import Action
from seedchess.engine.piece import Color, PieceKind
from seedchess.engine.seeds import SeedRegistry
from seedchess.eval import CHECKMATE_SCORE, evaluate
from seedchess.search.ordering import ordered_actions


logger = logging.getLogger(__name__)

INF = 10_000_000


@dataclass
class SearchResult:
    best_action: Optional[Action]
    score: Optional[int]
    nodes: int
    depth: int
    time_ms: int
    from_book: bool = False


class SearchService:
    """Fixed-depth minimax with alpha-beta pruning over moves and plants.

    White maximizes and Black minimizes the evaluation. The live board and
    seed registry are never touched: the search works on ``board.copy()`` and
    a clone of the registry, applying every explored action with an exact
    apply/undo pair.
    """

    def __init__(self, book: Optional[HistoryBook] = None, rng: Optional[random.Random] = None) -> None:
        self.book = book
        self.rng = rng or random.Random()

    def _book_action(
        self, board: Board, color: Color, history: Sequence[str], mode: GameMode
    ) -> Optional[Action]:
        if self.book is None:
            return None
        hit = self.book.find(history, self.rng)
        if hit is None:
            return None
        action = Action.move(hit[0], hit[1])
        for legal in rules.all_legal_actions(color, board, mode):
            if legal.same_squares(action):
                return action
        logger.debug("book move not legal here", extra={"action": str(action)})
        return None

    def search(
        self,
        board: Board,
        seeds: SeedRegistry,
        color: Color,
        *,
        mode: GameMode = GameMode.CLASSIC,
        depth: Optional[int] = None,
        settings: Optional[AISettings] = None,
        history: Sequence[str] = (),
        cancel: Optional[threading.Event] = None,
    ) -> SearchResult:
        """Pick the best action for ``color``.

        Args:
            board (Board): Live position; only a copy is searched.
            seeds (SeedRegistry): Live registry; only a clone is searched.
            color (Color): Side the engine plays.
            mode (GameMode): Classic games consult the opening book first.
            depth (Optional[int]): Plies to search; defaults per mode from
                ``settings``.
            settings (Optional[AISettings]): Search knobs.
            history (Sequence[str]): Book-notation history of the game.
            cancel (Optional[threading.Event]): Set to abort the search.

        Returns:
            SearchResult: ``best_action`` is ``None`` when ``color`` has no
                legal action. Promotions are returned as queen promotions.

        Raises:
            SearchCancelled: If ``cancel`` is set while searching.
            ValueError: If ``depth`` is below 1.
        """
        settings = settings or AISettings()
        if depth is None:
            depth = settings.depth_for(mode)
        if depth < 1:
            raise ValueError("depth must be >= 1")
        start = time.perf_counter()

        if mode is GameMode.CLASSIC and settings.use_book:
            book_action = self._book_action(board, color, history, mode)
            if book_action is not None:
                res = SearchResult(
                    best_action=book_action,
                    score=None,
                    nodes=0,
                    depth=0,
                    time_ms=int((time.perf_counter() - start) * 1000),
                    from_book=True,
                )
                logger.info("book move", extra={"action": str(book_action), "color": color.value})
                return res

        work = board.copy()
        scratch = seeds.clone()
        discount = settings.seed_discount_base
        tick = settings.simulate_seed_hatching
        nodes = 0

        def minimax(d: int, alpha: int, beta: int, side: Color) -> int:
            nonlocal nodes
            nodes += 1
            if cancel is not None and cancel.is_set():
                raise SearchCancelled()
            if d == 0:
                return evaluate(work, scratch, discount)
            actions = ordered_actions(side, work, mode)
            if not actions:
                if rules.is_king_in_check(side, work):
                    # Faster mates score further from zero
                    return -CHECKMATE_SCORE - d if side is Color.WHITE else CHECKMATE_SCORE + d
                return 0
            if side is Color.WHITE:
                best = -INF
                for a in actions:
                    undo = rules.apply_action(work, scratch, a, side, end_turn=tick)
                    try:
                        v = minimax(d - 1, alpha, beta, side.opponent)
                    finally:
                        rules.undo_action(work, scratch, undo)
                    best = max(best, v)
                    alpha = max(alpha, v)
                    if beta <= alpha:
                        break
                return best
            best = INF
            for a in actions:
                undo = rules.apply_action(work, scratch, a, side, end_turn=tick)
                try:
                    v = minimax(d - 1, alpha, beta, side.opponent)
                finally:
                    rules.undo_action(work, scratch, undo)
                best = min(best, v)
                beta = min(beta, v)
                if beta <= alpha:
                    break
            return best

        best_action: Optional[Action] = None
        best_score: Optional[int] = None
        maximizing = color is Color.WHITE
        for action in ordered_actions(color, work, mode):
            promote = rules.is_promotion(action, work)
            undo = rules.apply_action(work, scratch, action, color, end_turn=tick)
            try:
                score = minimax(depth - 1, -INF, INF, color.opponent)
            finally:
                rules.undo_action(work, scratch, undo)
            if best_score is None or (score > best_score if maximizing else score < best_score):
                best_score = score
                best_action = action.with_promotion(PieceKind.QUEEN) if promote else action

        res = SearchResult(
            best_action=best_action,
            score=best_score,
            nodes=nodes,
            depth=depth,
            time_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.info(
            "search done",
            extra={
                "color": color.value,
                "depth": depth,
                "nodes": nodes,
                "time_ms": res.time_ms,
                "best": str(best_action) if best_action is not None else None,
                "score": best_score,
            },
        )
        return res
