"""Evaluation heuristics.

Pure, deterministic, and side-effect free. Positive scores favor White.
"""

from __future__ import annotations

from typing import Dict, Final, Iterable, List

from seedchess.engine.board import Board
from seedchess.engine.piece import PIECE_VALUES, Color, Piece, PieceKind
from seedchess.engine.seeds import Seed


CHECKMATE_SCORE: Final = 999999
DEFAULT_SEED_DISCOUNT: Final = 0.85


# Piece-square tables (white perspective), centipawns, index = rank * 8 + file
PSQT_P: Final = [
      0,   0,   0,   0,   0,   0,   0,   0,
      5,  10,  10, -20, -20,  10,  10,   5,
      5,  -5, -10,   0,   0, -10,  -5,   5,
      0,   0,   0,  20,  20,   0,   0,   0,
      5,   5,  10,  25,  25,  10,   5,   5,
     10,  10,  20,  30,  30,  20,  10,  10,
     50,  50,  50,  50,  50,  50,  50,  50,
      0,   0,   0,   0,   0,   0,   0,   0,
]  # fmt: skip

PSQT_N: Final = [
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,   5,  15,  20,  20,  15,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  10,  15,  15,  10,   5, -30,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
]  # fmt: skip

PSQT_B: Final = [
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   5,   0,   0,   0,   0,   5, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
]  # fmt: skip

PSQT_R: Final = [
      0,   0,   0,   5,   5,   0,   0,   0,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
      5,  10,  10,  10,  10,  10,  10,   5,
      0,   0,   0,   0,   0,   0,   0,   0,
]  # fmt: skip

PSQT_Q: Final = [
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   5,   0,   0,   0,   0, -10,
    -10,   5,   5,   5,   5,   5,   0, -10,
      0,   0,   5,   5,   5,   5,   0,  -5,
     -5,   0,   5,   5,   5,   5,   0,  -5,
    -10,   0,   5,   5,   5,   5,   0, -10,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -20, -10, -10,  -5,  -5, -10, -10, -20,
]  # fmt: skip

# Middlegame table only; no phase blending
PSQT_K: Final = [
     20,  30,  10,   0,   0,  10,  30,  20,
     20,  20,   0,   0,   0,   0,  20,  20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
]  # fmt: skip

PSQT: Final[Dict[PieceKind, List[int]]] = {
    PieceKind.PAWN: PSQT_P,
    PieceKind.KNIGHT: PSQT_N,
    PieceKind.BISHOP: PSQT_B,
    PieceKind.ROOK: PSQT_R,
    PieceKind.QUEEN: PSQT_Q,
    PieceKind.KING: PSQT_K,
}


def _psqt_index(piece: Piece) -> int:
    file, rank = piece.square
    # Flip vertically for Black
    row = rank if piece.color is Color.WHITE else 7 - rank
    return row * 8 + file


def piece_score(piece: Piece) -> int:
    """Material plus table bonus for one piece, from its own side's view."""
    if piece.is_seed or piece.kind is PieceKind.NONE:
        return 0
    return PIECE_VALUES[piece.kind] + PSQT[piece.kind][_psqt_index(piece)]


def seed_value(target_kind: PieceKind, turns_remaining: int, discount_base: float = DEFAULT_SEED_DISCOUNT) -> int:
    """Discounted worth of a seed: ``round(value * base ** turns)``."""
    base = PIECE_VALUES.get(target_kind)
    if base is None:
        return 0
    return int(round(base * discount_base**turns_remaining))


def evaluate(board: Board, seeds: Iterable[Seed] = (), discount_base: float = DEFAULT_SEED_DISCOUNT) -> int:
    """Return a material + PSQT + seed evaluation in centipawns.

    Positive means advantage for White. Terminal states (mate, stalemate) are
    scored by the search, not here.

    Args:
        board (Board): Position to score. Seed markers contribute nothing.
        seeds (Iterable[Seed]): Pending seeds to credit to their owners.
        discount_base (float): Per-turn discount applied to seed values.

    Returns:
        int: Score in centipawns.
    """
    score = 0
    for p in board.pieces():
        v = piece_score(p)
        score += v if p.color is Color.WHITE else -v
    for s in seeds:
        v = seed_value(s.target_kind, s.turns_remaining, discount_base)
        score += v if s.owner is Color.WHITE else -v
    return score
