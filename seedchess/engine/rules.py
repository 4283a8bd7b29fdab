from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .board import Board, MoveUndo
from .config import GameMode
from .errors import InvariantError
from .move import PLANTABLE_KINDS, Action, Square, square_to_str
from .movegen import pseudo_legal_targets
from .piece import Color, Piece, PieceKind
from .seeds import Seed, SeedRegistry, TickUndo, plantable_squares


class GameState(Enum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"

    @property
    def is_over(self) -> bool:
        return self in (GameState.CHECKMATE, GameState.STALEMATE)


@dataclass
class TurnUndo:
    """Composite undo record for one action plus its optional end-of-turn tick."""

    move: MoveUndo
    planted: Optional[Seed] = None
    removed: Optional[Tuple[int, Seed]] = None
    tick: Optional[TickUndo] = None


def is_king_in_check(color: Color, board: Board) -> bool:
    """Return True if any enemy piece attacks the king of ``color``.

    Recomputed from scratch on every call. A board without that king
    reports False.
    """
    king = board.find_king(color)
    if king is None:
        return False
    target = king.square
    for p in board.pieces(color.opponent):
        if target in pseudo_legal_targets(p, board):
            return True
    return False


def _leaves_king_safe(board: Board, action: Action, color: Color) -> bool:
    undo = board.make_move(action, color)
    try:
        return not is_king_in_check(color, board)
    finally:
        board.unmake_move(undo)


def _en_passant_action(piece: Piece, board: Board, ep_target: Optional[Square]) -> Optional[Action]:
    if ep_target is None:
        return None
    file, rank = piece.square
    if ep_target[1] != rank + piece.color.forward or abs(ep_target[0] - file) != 1:
        return None
    victim = board.grid[ep_target[0]][rank]
    if victim is None or victim.is_seed or victim.kind is not PieceKind.PAWN or victim.color is piece.color:
        return None
    action = Action.move(piece.square, ep_target)
    return action if _leaves_king_safe(board, action, piece.color) else None


def _can_castle(king: Piece, board: Board, kingside: bool) -> bool:
    file, rank = king.square
    rook = board.grid[7 if kingside else 0][rank]
    if (
        rook is None
        or rook.is_seed
        or rook.kind is not PieceKind.ROOK
        or rook.color is not king.color
        or rook.has_moved
    ):
        return False
    if is_king_in_check(king.color, board):
        return False
    step = 1 if kingside else -1
    # Seed markers count as occupied here
    for f in range(file + step, rook.square[0], step):
        if board.grid[f][rank] is not None:
            return False
    for f in (file + step, file + 2 * step):
        with board.relocated(king, (f, rank)):
            if is_king_in_check(king.color, board):
                return False
    return True


def legal_actions(piece: Piece, board: Board) -> List[Action]:
    """Return the legal moves of ``piece`` against the board's en-passant target.

    Pseudo-legal targets are kept only if a make/unmake of the move leaves the
    own king safe. Pawns may gain an en-passant capture and an unmoved king
    up to two castling moves, kingside first. Promotion moves carry no kind.

    Args:
        piece (Piece): A non-seed piece on ``board``.
        board (Board): Position to generate against; restored before return.

    Returns:
        List[Action]: Legal actions in generator order.
    """
    if board.piece_at(piece.square) is not piece:
        raise InvariantError(f"piece is not on {square_to_str(piece.square)}")
    if piece.is_seed:
        return []
    out: List[Action] = []
    for to_sq in pseudo_legal_targets(piece, board):
        action = Action.move(piece.square, to_sq)
        if _leaves_king_safe(board, action, piece.color):
            out.append(action)
    if piece.kind is PieceKind.PAWN:
        ep = _en_passant_action(piece, board, board.ep_target)
        if ep is not None:
            out.append(ep)
    if piece.kind is PieceKind.KING and not piece.has_moved:
        file, rank = piece.square
        if _can_castle(piece, board, True):
            out.append(Action.move(piece.square, (file + 2, rank)))
        if _can_castle(piece, board, False):
            out.append(Action.move(piece.square, (file - 2, rank)))
    return out


def plant_actions(color: Color, board: Board) -> List[Action]:
    """Plant actions for ``color``: each empty king neighbour times each seed kind.

    Empty when the king is missing or in check.
    """
    king = board.find_king(color)
    if king is None or is_king_in_check(color, board):
        return []
    return [Action.plant(sq, kind) for sq in plantable_squares(king, board) for kind in PLANTABLE_KINDS]


def all_legal_actions(color: Color, board: Board, mode: GameMode = GameMode.CLASSIC) -> List[Action]:
    """Every legal action of ``color``: piece moves file by file, then plants."""
    out: List[Action] = []
    for p in list(board.pieces(color)):
        out.extend(legal_actions(p, board))
    if mode is GameMode.SEED:
        out.extend(plant_actions(color, board))
    return out


def has_any_legal_action(color: Color, board: Board, mode: GameMode = GameMode.CLASSIC) -> bool:
    for p in list(board.pieces(color)):
        if legal_actions(p, board):
            return True
    if mode is GameMode.SEED and not is_king_in_check(color, board):
        king = board.find_king(color)
        if king is not None and plantable_squares(king, board):
            return True
    return False


def classify(color: Color, board: Board, mode: GameMode = GameMode.CLASSIC) -> GameState:
    """State of the game from the point of view of ``color``, the side to move."""
    in_check = is_king_in_check(color, board)
    can_act = has_any_legal_action(color, board, mode)
    if not can_act:
        return GameState.CHECKMATE if in_check else GameState.STALEMATE
    return GameState.CHECK if in_check else GameState.PLAYING


def is_promotion(action: Action, board: Board) -> bool:
    """True if ``action`` moves a pawn onto its last rank (evaluated before applying)."""
    if action.is_plant or action.from_sq is None:
        return False
    p = board.piece_at(action.from_sq)
    return p is not None and p.kind is PieceKind.PAWN and action.to_sq[1] == p.color.promotion_rank


def is_castle(action: Action, board: Board) -> bool:
    if action.is_plant or action.from_sq is None:
        return False
    p = board.piece_at(action.from_sq)
    return p is not None and p.kind is PieceKind.KING and abs(action.to_sq[0] - action.from_sq[0]) == 2


def apply_action(
    board: Board,
    seeds: SeedRegistry,
    action: Action,
    color: Color,
    *,
    end_turn: bool = True,
) -> TurnUndo:
    """Apply ``action`` for ``color`` to the board and the seed registry.

    Keeps seeds and markers paired: a plant registers its seed, a capture of a
    seed marker drops the seed. With ``end_turn`` the seeds of ``color`` tick
    afterwards. Legality is the caller's responsibility.

    Returns:
        TurnUndo: Record consumed by :func:`undo_action`.

    Raises:
        InvariantError: If a captured marker has no seed behind it.
    """
    move_undo = board.make_move(action, color)
    undo = TurnUndo(move_undo)
    if action.is_plant:
        assert action.plant_kind is not None
        undo.planted = seeds.plant(board, action.to_sq, color, action.plant_kind)
    elif move_undo.captured is not None and move_undo.captured.is_seed:
        removed = seeds.remove_at(action.to_sq)
        if removed is None:
            board.unmake_move(move_undo)
            raise InvariantError(f"captured marker on {square_to_str(action.to_sq)} has no seed")
        undo.removed = removed
    if end_turn:
        undo.tick = seeds.end_turn(color, board)
    return undo


def undo_action(board: Board, seeds: SeedRegistry, undo: TurnUndo) -> None:
    """Exactly reverse :func:`apply_action`."""
    if undo.tick is not None:
        seeds.untick(board, undo.tick)
    if undo.planted is not None:
        seeds.pop(undo.planted)
    if undo.removed is not None:
        seeds.restore(*undo.removed)
    board.unmake_move(undo.move)
