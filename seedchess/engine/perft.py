from __future__ import annotations

from typing import Dict, List, Optional

from . import rules
from .board import Board
from .config import GameMode
from .move import PROMOTION_KINDS, Action
from .piece import Color
from .seeds import SeedRegistry


def _expand(action: Action, board: Board) -> List[Action]:
    # Promotion moves from the legal list expand into one child per kind
    if rules.is_promotion(action, board):
        return [action.with_promotion(k) for k in PROMOTION_KINDS]
    return [action]


def perft(
    board: Board,
    depth: int,
    color: Color = Color.WHITE,
    mode: GameMode = GameMode.CLASSIC,
    seeds: Optional[SeedRegistry] = None,
) -> int:
    """Count leaf nodes of the legal action tree below ``board``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal children of perft(depth-1).

    Every child is visited with ``rules.apply_action``/``undo_action``, so the
    board and registry are left exactly as they were. Seed mode ticks seeds at
    the end of each turn like live play.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if seeds is None:
        seeds = SeedRegistry()
    nodes = 0
    for legal in rules.all_legal_actions(color, board, mode):
        for action in _expand(legal, board):
            undo = rules.apply_action(board, seeds, action, color, end_turn=mode is GameMode.SEED)
            nodes += perft(board, depth - 1, color.opponent, mode, seeds)
            rules.undo_action(board, seeds, undo)
    return nodes


def perft_divide(
    board: Board,
    depth: int,
    color: Color = Color.WHITE,
    mode: GameMode = GameMode.CLASSIC,
    seeds: Optional[SeedRegistry] = None,
) -> Dict[str, int]:
    """Per-root-action node counts, keyed by action notation."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    if seeds is None:
        seeds = SeedRegistry()
    out: Dict[str, int] = {}
    for legal in rules.all_legal_actions(color, board, mode):
        for action in _expand(legal, board):
            undo = rules.apply_action(board, seeds, action, color, end_turn=mode is GameMode.SEED)
            out[action.to_notation()] = perft(board, depth - 1, color.opponent, mode, seeds)
            rules.undo_action(board, seeds, undo)
    return out
