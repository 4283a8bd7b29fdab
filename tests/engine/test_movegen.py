from __future__ import annotations

from seedchess.engine.board import Board
from seedchess.engine.move import str_to_square
from seedchess.engine.movegen import pseudo_legal_targets


def _targets(fen: str, square: str) -> set[str]:
    b = Board.from_fen(fen)
    p = b.piece_at(str_to_square(square))
    assert p is not None
    return {"abcdefgh"[f] + str(r + 1) for f, r in pseudo_legal_targets(p, b)}


def test_rook_slides_through_seed_marker() -> None:
    # Black seed on c1 does not stop the rook; the own king on e1 does
    got = _targets("4k3/8/8/8/8/8/8/R1s1K3 w - - 0 1", "a1")
    assert {"b1", "c1", "d1"} <= got
    assert "e1" not in got and "f1" not in got


def test_pawn_pushes_through_seed_but_never_captures_one() -> None:
    got = _targets("4k3/8/8/8/8/3s4/4P3/4K3 w - - 0 1", "e2")
    assert got == {"e3", "e4"}

    got = _targets("4k3/8/8/8/8/4s3/4P3/4K3 w - - 0 1", "e2")
    assert got == {"e3", "e4"}


def test_pawn_double_step_only_from_start_rank() -> None:
    got = _targets("4k3/8/8/8/8/4P3/8/4K3 w - - 0 1", "e3")
    assert got == {"e4"}


def test_knight_may_land_on_any_seed() -> None:
    got = _targets("4k3/8/8/8/8/2S5/8/1N2K3 w - - 0 1", "b1")
    assert got == {"a3", "c3", "d2"}


def test_seed_marker_has_no_targets() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3S4/4K3 w - - 0 1")
    marker = b.piece_at(str_to_square("d2"))
    assert marker is not None and marker.is_seed
    assert pseudo_legal_targets(marker, b) == []
