from __future__ import annotations

import pytest

from seedchess.engine.board import STARTPOS_FEN, Board
from seedchess.engine.config import GameMode
from seedchess.engine.perft import perft, perft_divide
from seedchess.engine.piece import Color
from seedchess.engine.seeds import SeedRegistry


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
POSITION_3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
POSITION_4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"


@pytest.mark.parametrize("depth,expected", [(1, 20), (2, 400), (3, 8902)])
def test_perft_startpos(depth: int, expected: int) -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert perft(b, depth) == expected
    assert b.to_fen() == STARTPOS_FEN


@pytest.mark.parametrize(
    "fen,depth,expected",
    [
        (KIWIPETE, 1, 48),
        (KIWIPETE, 2, 2039),
        (POSITION_3, 1, 14),
        (POSITION_3, 2, 191),
        (POSITION_4, 1, 6),
        (POSITION_4, 2, 264),
    ],
)
def test_perft_reference_positions(fen: str, depth: int, expected: int) -> None:
    assert perft(Board.from_fen(fen), depth) == expected


def test_perft_depth_zero_counts_root() -> None:
    assert perft(Board.from_fen(STARTPOS_FEN), 0) == 1
    with pytest.raises(ValueError):
        perft(Board.from_fen(STARTPOS_FEN), -1)


def test_divide_sums_to_perft() -> None:
    b = Board.from_fen(KIWIPETE)
    div = perft_divide(b, 2)
    assert len(div) == 48
    assert sum(div.values()) == 2039
    assert "e1g1" in div and "e1c1" in div


def test_seed_mode_perft_from_kings_only() -> None:
    b = Board.setup(GameMode.SEED)
    seeds = SeedRegistry()
    assert perft(b, 1, Color.WHITE, GameMode.SEED, seeds) == 30
    # Nothing White does can reach Black's king area
    assert perft(b, 2, Color.WHITE, GameMode.SEED, seeds) == 900
    assert len(seeds) == 0
