#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# Ensure repo root (which contains `seedchess/`) is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from seedchess.engine.config import AISettings, GameConfig, GameMode
from seedchess.engine.game import Game
from seedchess.search.service import SearchResult, SearchService


@dataclass
class BenchItem:
    id: str
    fen: str
    mode: GameMode = GameMode.CLASSIC
    depth: Optional[int] = None


DEFAULT_POSITIONS: List[BenchItem] = [
    BenchItem("startpos", "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"),
    BenchItem("italian", "r1bqk1nr/pppp1ppp/2n5/2b1p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"),
    BenchItem("kiwipete", "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1", depth=3),
    BenchItem("seed-start", "4k3/8/8/8/8/8/8/4K3 w - - 0 1", GameMode.SEED, depth=2),
]


def load_positions(path: str) -> List[BenchItem]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    items: List[BenchItem] = []
    for obj in data.get("positions", []):
        items.append(
            BenchItem(
                id=str(obj.get("id", "pos")),
                fen=str(obj["fen"]),
                mode=GameMode(obj.get("mode", GameMode.CLASSIC.value)),
                depth=(int(obj["depth"]) if obj.get("depth") is not None else None),
            )
        )
    return items


def bench_position(svc: SearchService, item: BenchItem, *, depth: Optional[int], iterations: int) -> Dict[str, Any]:
    game = Game.from_fen(item.fen, GameConfig(mode=item.mode))
    settings = AISettings(use_book=False)
    eff_depth = item.depth if item.depth is not None else depth

    total_time = 0
    total_nodes = 0
    last: Optional[SearchResult] = None
    for _ in range(max(1, iterations)):
        res = svc.search(game.board, game.seeds, game.turn, mode=item.mode, depth=eff_depth, settings=settings)
        total_time += max(0, res.time_ms)
        total_nodes += res.nodes
        last = res
    assert last is not None

    avg_time = int(total_time / max(1, iterations))
    avg_nodes = int(total_nodes / max(1, iterations))
    return {
        "id": item.id,
        "mode": item.mode.value,
        "depth": last.depth,
        "best": str(last.best_action) if last.best_action else None,
        "score": last.score,
        "time_ms": avg_time,
        "nodes": avg_nodes,
        "nps": int(avg_nodes * 1000 / max(1, avg_time)),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Time the search over a few positions")
    parser.add_argument("--positions", default=None, help="Path to a positions JSON file")
    parser.add_argument("--depth", type=int, default=None, help="Global depth (default: per mode)")
    parser.add_argument("--iterations", type=int, default=1, help="Repeat runs per position and average")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args()

    items = load_positions(args.positions) if args.positions else DEFAULT_POSITIONS
    if not items:
        raise SystemExit("No positions found in positions file")

    svc = SearchService()
    t0 = time.perf_counter()
    results = [bench_position(svc, it, depth=args.depth, iterations=args.iterations) for it in items]
    dt_ms = int((time.perf_counter() - t0) * 1000)
    total_nodes = sum(r["nodes"] for r in results)

    payload = {
        "meta": {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "python": sys.version.split()[0],
            "platform": platform.platform(),
        },
        "results": results,
        "summary": {
            "positions": len(results),
            "total_time_ms": dt_ms,
            "total_nodes": total_nodes,
            "overall_nps": int(total_nodes * 1000 / max(1, dt_ms)),
        },
    }
    print(json.dumps(payload, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
