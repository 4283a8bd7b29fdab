from __future__ import annotations

from typing import List, Optional, Tuple

from seedchess.engine import rules
from seedchess.engine.board import Board
from seedchess.engine.config import GameMode
from seedchess.engine.move import Action
from seedchess.engine.piece import PIECE_VALUES, Color, PieceKind
from seedchess.engine.seeds import GROWTH_TURNS


def mvv_lva(action: Action, board: Board) -> Optional[int]:
    """Capture score ``victim * 10 - attacker``, or ``None`` for non-captures.

    Landing on a seed marker is not a capture. An en-passant capture values
    its victim as a pawn.
    """
    if action.is_plant or action.from_sq is None:
        return None
    attacker = board.piece_at(action.from_sq)
    if attacker is None:
        return None
    a = PIECE_VALUES.get(attacker.kind, 0)
    target = board.piece_at(action.to_sq)
    if target is not None and not target.is_seed:
        return PIECE_VALUES.get(target.kind, 0) * 10 - a
    if (
        attacker.kind is PieceKind.PAWN
        and board.ep_target is not None
        and action.to_sq == board.ep_target
        and action.from_sq[0] != action.to_sq[0]
    ):
        return PIECE_VALUES[PieceKind.PAWN] * 10 - a
    return None


def order_actions(actions: List[Action], board: Board) -> List[Action]:
    """Sort actions for pruning: promotions, captures, plants, then quiet moves.

    Captures go by MVV-LVA descending and plants by growth time ascending.
    Both sorts are stable; promotions and quiet moves keep generation order.
    """
    promotions: List[Action] = []
    captures: List[Tuple[int, Action]] = []
    plants: List[Tuple[int, Action]] = []
    quiet: List[Action] = []
    for a in actions:
        if a.is_plant:
            assert a.plant_kind is not None
            plants.append((GROWTH_TURNS[a.plant_kind], a))
            continue
        if rules.is_promotion(a, board):
            promotions.append(a)
            continue
        score = mvv_lva(a, board)
        if score is not None:
            captures.append((score, a))
        else:
            quiet.append(a)
    captures.sort(key=lambda t: t[0], reverse=True)
    plants.sort(key=lambda t: t[0])
    return promotions + [a for _, a in captures] + [a for _, a in plants] + quiet


def ordered_actions(color: Color, board: Board, mode: GameMode) -> List[Action]:
    return order_actions(rules.all_legal_actions(color, board, mode), board)
