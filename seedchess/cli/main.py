from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from seedchess.engine.config import GameMode, load_config
from seedchess.engine.game import Game
from seedchess.search.player import AIPlayer


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seedchess", description="Seed Chess engine")
    parser.add_argument("--config", default=None, help="JSON file with GameConfig fields")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the local HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    best = sub.add_parser("bestmove", help="Print the AI's choice for a position")
    best.add_argument("--fen", default=None, help="Position (default: start position of the mode)")
    best.add_argument("--mode", choices=[m.value for m in GameMode], default=None)
    best.add_argument("--depth", type=int, default=None, help="Override the search depth")
    best.add_argument("--no-book", action="store_true", help="Skip the opening book")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    overrides = {}
    if getattr(args, "mode", None):
        overrides["mode"] = args.mode
    config = load_config(args.config, **overrides)

    if args.command == "bestmove":
        logging.basicConfig(level=logging.WARNING)
        ai_updates = {"use_book": False} if args.no_book else {}
        if args.depth is not None:
            ai_updates["classic_depth"] = args.depth
            ai_updates["seed_depth"] = args.depth
        config = config.with_overrides(**ai_updates)
        game = Game.from_fen(args.fen, config) if args.fen else Game.new(config)
        # The engine plays whichever side is to move
        config = config.model_copy(update={"ai_color": game.turn})
        action = AIPlayer(config).choose_action(game)
        print(action.to_notation())
        return

    from seedchess.protocol.http.app import create_app

    host = getattr(args, "host", "127.0.0.1")
    port = getattr(args, "port", 8000)
    uvicorn.run(create_app(config), host=host, port=port)


if __name__ == "__main__":
    main()
