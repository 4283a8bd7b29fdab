#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `seedchess/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from seedchess.engine.board import STARTPOS_FEN, Board
from seedchess.engine.config import GameMode
from seedchess.engine.perft import perft, perft_divide
from seedchess.engine.piece import Color


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument("--fen", type=str, default=None, help="FEN string (default: start of the mode)")
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--mode", choices=[m.value for m in GameMode], default=GameMode.CLASSIC.value)
    parser.add_argument("--divide", action="store_true", help="Print per-root-action counts")
    args = parser.parse_args()

    mode = GameMode(args.mode)
    fen = args.fen or (STARTPOS_FEN if mode is GameMode.CLASSIC else None)
    board = Board.from_fen(fen) if fen else Board.setup(mode)
    color = Color.BLACK if fen and fen.split()[1:2] == ["b"] else Color.WHITE

    start = time.perf_counter()
    if args.divide:
        counts = perft_divide(board, args.depth, color, mode)
        for action, n in counts.items():
            print(f"{action}: {n}")
        nodes = sum(counts.values())
    else:
        nodes = perft(board, args.depth, color, mode)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
