from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from seedchess.cli.main import main
from seedchess.engine.move import parse_action


def test_bestmove_prints_action(capsys) -> None:
    main(["bestmove", "--no-book", "--depth", "1"])
    out = capsys.readouterr().out.strip()
    assert parse_action(out).to_notation() == out


def test_bestmove_finds_mate_from_fen(capsys) -> None:
    main(["bestmove", "--fen", "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1", "--depth", "2"])
    assert capsys.readouterr().out.strip() == "a1a8"


def test_bestmove_seed_mode_with_config_file(tmp_path, capsys) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"ai": {"seed_depth": 1, "ai_thinking_delay_s": 0}}))
    main(["--config", str(path), "bestmove", "--mode", "seed"])
    out = capsys.readouterr().out.strip()
    assert "@" in out or len(out) == 4


def test_bestmove_rejects_invalid_depth() -> None:
    with pytest.raises(ValidationError):
        main(["bestmove", "--depth", "0"])


def test_bestmove_plays_side_to_move(capsys) -> None:
    fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    main(["bestmove", "--no-book", "--depth", "1", "--fen", fen])
    out = capsys.readouterr().out.strip()
    assert int(out[1]) >= 7
