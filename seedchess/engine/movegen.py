from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Final, List, Tuple

from .move import Square, in_bounds
from .piece import Piece, PieceKind

if TYPE_CHECKING:
    from .board import Board


KNIGHT_OFFSETS: Final = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
KING_OFFSETS: Final = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))
ROOK_DIRS: Final = ((1, 0), (-1, 0), (0, 1), (0, -1))
BISHOP_DIRS: Final = ((1, 1), (1, -1), (-1, 1), (-1, -1))
QUEEN_DIRS: Final = ROOK_DIRS + BISHOP_DIRS


def _empty_or_seed(board: "Board", file: int, rank: int) -> bool:
    p = board.grid[file][rank]
    return p is None or p.is_seed


def _enemy_piece(board: "Board", piece: Piece, file: int, rank: int) -> bool:
    p = board.grid[file][rank]
    return p is not None and not p.is_seed and p.color is not piece.color


def _pawn_targets(piece: Piece, board: "Board") -> List[Square]:
    out: List[Square] = []
    file, rank = piece.square
    fwd = piece.color.forward
    one = rank + fwd
    if in_bounds(file, one) and _empty_or_seed(board, file, one):
        out.append((file, one))
        two = rank + 2 * fwd
        if rank == piece.color.pawn_start_rank and in_bounds(file, two) and _empty_or_seed(board, file, two):
            out.append((file, two))
    # Diagonal captures only onto real enemy pieces, never seed markers
    for df in (-1, 1):
        tf = file + df
        if in_bounds(tf, one) and _enemy_piece(board, piece, tf, one):
            out.append((tf, one))
    return out


def _slide(piece: Piece, board: "Board", dirs: Tuple[Tuple[int, int], ...]) -> List[Square]:
    out: List[Square] = []
    file, rank = piece.square
    for df, dr in dirs:
        tf, tr = file + df, rank + dr
        while in_bounds(tf, tr):
            if _empty_or_seed(board, tf, tr):
                # Seed markers are permeable: land on them and keep walking
                out.append((tf, tr))
            else:
                if board.grid[tf][tr].color is not piece.color:
                    out.append((tf, tr))
                break
            tf += df
            tr += dr
    return out


def _step(piece: Piece, board: "Board", offsets: Tuple[Tuple[int, int], ...]) -> List[Square]:
    out: List[Square] = []
    file, rank = piece.square
    for df, dr in offsets:
        tf, tr = file + df, rank + dr
        if not in_bounds(tf, tr):
            continue
        if _empty_or_seed(board, tf, tr) or _enemy_piece(board, piece, tf, tr):
            out.append((tf, tr))
    return out


_GENERATORS: Final[Dict[PieceKind, Callable[[Piece, "Board"], List[Square]]]] = {
    PieceKind.NONE: lambda piece, board: [],
    PieceKind.PAWN: _pawn_targets,
    PieceKind.ROOK: lambda piece, board: _slide(piece, board, ROOK_DIRS),
    PieceKind.BISHOP: lambda piece, board: _slide(piece, board, BISHOP_DIRS),
    PieceKind.QUEEN: lambda piece, board: _slide(piece, board, QUEEN_DIRS),
    PieceKind.KNIGHT: lambda piece, board: _step(piece, board, KNIGHT_OFFSETS),
    PieceKind.KING: lambda piece, board: _step(piece, board, KING_OFFSETS),
}


def pseudo_legal_targets(piece: Piece, board: "Board") -> List[Square]:
    """Return destination squares for ``piece`` ignoring check safety.

    Castling, en passant and planting are not produced here. Seed markers
    have no moves.

    Args:
        piece (Piece): Piece standing on ``board``.
        board (Board): Position to generate against.

    Returns:
        List[Square]: Targets in generator order.
    """
    if piece.is_seed:
        return []
    return _GENERATORS[piece.kind](piece, board)
