from __future__ import annotations

import pytest

from seedchess.engine import rules
from seedchess.engine.board import STARTPOS_FEN, Board
from seedchess.engine.config import GameMode
from seedchess.engine.move import str_to_square
from seedchess.engine.piece import Color
from seedchess.engine.rules import GameState


FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
QUEEN_STALEMATE = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
QUEEN_MATE = "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1"


def test_check_query_leaves_board_untouched() -> None:
    b = Board.from_fen(FOOLS_MATE)
    before = b.snapshot()
    assert rules.is_king_in_check(Color.WHITE, b) is True
    assert rules.is_king_in_check(Color.BLACK, b) is False
    assert b.snapshot() == before


def test_seed_marker_does_not_block_check() -> None:
    # Own seed on e4 between the king and the rook
    b = Board.from_fen("4r2k/8/8/8/4S3/8/8/4K3 w - - 0 1")
    assert rules.is_king_in_check(Color.WHITE, b) is True


def test_missing_king_is_never_in_check() -> None:
    b = Board.from_fen("r6k/8/8/8/8/8/8/8 w - - 0 1")
    assert rules.is_king_in_check(Color.WHITE, b) is False


def test_start_position_has_twenty_moves() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert len(rules.all_legal_actions(Color.WHITE, b)) == 20
    assert rules.classify(Color.WHITE, b) is GameState.PLAYING


def test_pinned_piece_cannot_leave_the_line() -> None:
    # Knight on e2 pinned by the rook on e8
    b = Board.from_fen("4r2k/8/8/8/8/8/4N3/4K3 w - - 0 1")
    knight = b.piece_at(str_to_square("e2"))
    assert rules.legal_actions(knight, b) == []


@pytest.mark.parametrize("mode", [GameMode.CLASSIC, GameMode.SEED])
def test_checkmate_in_both_modes(mode: GameMode) -> None:
    assert rules.classify(Color.WHITE, Board.from_fen(FOOLS_MATE), mode) is GameState.CHECKMATE
    assert rules.classify(Color.BLACK, Board.from_fen(QUEEN_MATE), mode) is GameState.CHECKMATE


def test_check_state() -> None:
    b = Board.from_fen("4r2k/8/8/8/8/8/8/4K3 w - - 0 1")
    assert rules.classify(Color.WHITE, b) is GameState.CHECK


def test_stalemate_in_classic() -> None:
    b = Board.from_fen(QUEEN_STALEMATE)
    assert rules.classify(Color.BLACK, b, GameMode.CLASSIC) is GameState.STALEMATE
    assert not rules.has_any_legal_action(Color.BLACK, b, GameMode.CLASSIC)


def test_planting_avoids_stalemate_in_seed_mode() -> None:
    b = Board.from_fen(QUEEN_STALEMATE)
    assert rules.classify(Color.BLACK, b, GameMode.SEED) is GameState.PLAYING
    plants = rules.plant_actions(Color.BLACK, b)
    # g8, g7 and h7 times five seed kinds
    assert len(plants) == 15
    assert all(a.is_plant for a in plants)


def test_no_plants_while_in_check() -> None:
    b = Board.from_fen("4r2k/8/8/8/8/8/8/4K3 w - - 0 1")
    assert rules.plant_actions(Color.WHITE, b) == []
    actions = rules.all_legal_actions(Color.WHITE, b, GameMode.SEED)
    assert actions and not any(a.is_plant for a in actions)


def test_seed_markers_block_planting() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3SS3/3SK3 w - - 0 1")
    squares = {a.to_sq for a in rules.plant_actions(Color.WHITE, b)}
    assert squares == {str_to_square("f1"), str_to_square("f2")}


def test_stalemate_in_seed_mode_when_boxed_in() -> None:
    # Own markers fill every neighbour and each of them is covered by White
    b = Board.from_fen("6sk/6ss/5N2/8/8/8/8/K5R1 b - - 0 1")
    assert rules.is_king_in_check(Color.BLACK, b) is False
    assert rules.classify(Color.BLACK, b, GameMode.SEED) is GameState.STALEMATE
