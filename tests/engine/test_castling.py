from __future__ import annotations

from seedchess.engine import rules
from seedchess.engine.board import Board
from seedchess.engine.move import str_to_square
from seedchess.engine.piece import Color, PieceKind
from seedchess.engine.seeds import SeedRegistry


def _king_moves(fen: str, color: Color = Color.WHITE) -> list[str]:
    b = Board.from_fen(fen)
    king = b.find_king(color)
    assert king is not None
    return [a.to_notation() for a in rules.legal_actions(king, b)]


def test_both_castles_listed_kingside_first() -> None:
    moves = _king_moves("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert moves[-2:] == ["e1g1", "e1c1"]

    moves = _king_moves("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1", Color.BLACK)
    assert moves[-2:] == ["e8g8", "e8c8"]


def test_castling_blocked_by_piece() -> None:
    moves = _king_moves("4k3/8/8/8/8/8/8/RN2K1NR w KQ - 0 1")
    assert "e1g1" not in moves
    assert "e1c1" not in moves


def test_castling_blocked_by_seed_marker() -> None:
    moves = _king_moves("4k3/8/8/8/8/8/8/R3K1SR w KQ - 0 1")
    assert "e1g1" not in moves
    assert "e1c1" in moves


def test_queenside_b_file_must_be_empty() -> None:
    moves = _king_moves("4k3/8/8/8/8/8/8/Rn2K2R w KQ - 0 1")
    assert "e1c1" not in moves
    assert "e1g1" in moves


def test_no_castling_out_of_check() -> None:
    moves = _king_moves("4r2k/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert "e1g1" not in moves and "e1c1" not in moves


def test_no_castling_through_attacked_square() -> None:
    moves = _king_moves("5r1k/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert "e1g1" not in moves
    assert "e1c1" in moves


def test_no_castling_into_check() -> None:
    moves = _king_moves("6rk/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert "e1g1" not in moves


def test_rook_path_may_be_attacked() -> None:
    # b1 is attacked but only the king's path counts
    moves = _king_moves("1r5k/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert "e1c1" in moves


def test_moved_rook_cannot_castle() -> None:
    moves = _king_moves("4k3/8/8/8/8/8/8/R3K2R w Q - 0 1")
    assert "e1g1" not in moves
    assert "e1c1" in moves


def test_castle_moves_rook_and_undo_restores() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    seeds = SeedRegistry()
    before = b.snapshot()
    king = b.piece_at(str_to_square("e1"))
    action = next(a for a in rules.legal_actions(king, b) if a.to_notation() == "e1c1")
    assert rules.is_castle(action, b)

    undo = rules.apply_action(b, seeds, action, Color.WHITE)
    rook = b.piece_at(str_to_square("d1"))
    assert rook is not None and rook.kind is PieceKind.ROOK and rook.has_moved
    assert b.piece_at(str_to_square("a1")) is None
    assert b.to_fen(Color.BLACK).split()[2] == "kq"

    rules.undo_action(b, seeds, undo)
    assert b.snapshot() == before
