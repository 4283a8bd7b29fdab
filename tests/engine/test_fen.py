from __future__ import annotations

import pytest

from seedchess.engine.board import SEED_START_FEN, STARTPOS_FEN, Board
from seedchess.engine.move import str_to_square
from seedchess.engine.piece import Color, PieceKind


def test_startpos_roundtrip() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert b.to_fen() == STARTPOS_FEN


def test_seed_markers_roundtrip() -> None:
    fen = "4k3/3s4/8/8/8/8/3S4/4K3 b - - 0 1"
    b = Board.from_fen(fen)
    white = b.piece_at(str_to_square("d2"))
    black = b.piece_at(str_to_square("d7"))
    assert white is not None and white.is_seed and white.color is Color.WHITE
    assert black is not None and black.is_seed and black.color is Color.BLACK
    assert white.kind is PieceKind.NONE
    assert b.to_fen(Color.BLACK) == fen


def test_placement_only_fen_is_accepted() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/4K3")
    assert b.to_fen() == SEED_START_FEN


def test_castling_field_sets_rook_flags() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Kq - 0 1")
    assert b.piece_at(str_to_square("h1")).has_moved is False
    assert b.piece_at(str_to_square("a1")).has_moved is True
    assert b.piece_at(str_to_square("a8")).has_moved is False
    assert b.piece_at(str_to_square("h8")).has_moved is True
    assert b.to_fen().split()[2] == "Kq"


def test_en_passant_field_is_kept() -> None:
    fen = "4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1"
    b = Board.from_fen(fen)
    assert b.ep_target == str_to_square("d6")
    assert b.to_fen() == fen


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "8/8/8 w - - 0 1",
        "4k3/8/8/8/8/8/8/4K2 w - - 0 1",
        "4k3/8/8/8/8/8/8/4X3 w - - 0 1",
        "4k3/8/8/8/8/8/8/4K3 x - - 0 1",
        "4k3/8/8/8/8/8/8/4K3 w Z - 0 1",
        "4k3/8/8/8/8/8/8/4K3 w - e4 0 1",
        "4k3/8/8/8/8/8/8/4K3 w - - -1 1",
        "4k3/8/8/8/8/8/8/4K3 w - - 0",
    ],
)
def test_malformed_fen_raises(fen: str) -> None:
    with pytest.raises(ValueError):
        Board.from_fen(fen)
