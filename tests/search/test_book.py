from __future__ import annotations

import json
import random

import pytest

from seedchess.assets.book import DEFAULT_BOOK_PATH, HistoryBook, open_book
from seedchess.engine.board import STARTPOS_FEN, Board
from seedchess.engine.config import AISettings, GameMode
from seedchess.engine.move import Action, str_to_square
from seedchess.engine.piece import Color
from seedchess.engine.seeds import SeedRegistry
from seedchess.search.service import SearchService


def test_default_book_has_ten_lines() -> None:
    book = open_book()
    assert len(book) == 10
    assert open_book(DEFAULT_BOOK_PATH).candidates(["e2e4"]) == book.candidates(["e2e4"])


def test_exact_history_match_only() -> None:
    book = HistoryBook.default()
    assert book.find(["e2e4", "e7e5"]) is None
    assert book.find([]) is None
    replies = {(str_to_square(m[:2]), str_to_square(m[2:])) for m in ("e7e5", "c7c5", "e7e6")}
    for seed in range(5):
        assert book.find(["e2e4"], random.Random(seed)) in replies


def test_malformed_book_rejected(tmp_path) -> None:
    with pytest.raises(ValueError):
        HistoryBook({"e2e4": ["e7"]})
    with pytest.raises(ValueError):
        HistoryBook({"e2e4": "e7e5"})
    path = tmp_path / "book.json"
    path.write_text(json.dumps(["e2e4"]))
    with pytest.raises(ValueError):
        HistoryBook.from_json(str(path))
    with pytest.raises(FileNotFoundError):
        open_book(str(tmp_path / "missing.json"))


def test_search_uses_book_reply() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    b.make_move(Action.move(str_to_square("e2"), str_to_square("e4")), Color.WHITE)
    service = SearchService(book=HistoryBook.default(), rng=random.Random(7))
    res = service.search(b, SeedRegistry(), Color.BLACK, history=["e2e4"])
    assert res.from_book is True
    assert res.nodes == 0
    assert res.best_action.to_notation() in {"e7e5", "c7c5", "e7e6"}


def test_book_skipped_when_disabled_or_in_seed_mode() -> None:
    book = HistoryBook({"": ["e2e4"]})
    service = SearchService(book=book)
    res = service.search(
        Board.from_fen(STARTPOS_FEN), SeedRegistry(), Color.WHITE, depth=1, settings=AISettings(use_book=False)
    )
    assert res.from_book is False

    seed_board = Board.setup(GameMode.SEED)
    res = service.search(seed_board, SeedRegistry(), Color.WHITE, mode=GameMode.SEED, depth=1)
    assert res.from_book is False


def test_illegal_book_reply_falls_back_to_search() -> None:
    service = SearchService(book=HistoryBook({"": ["e2e5"]}))
    res = service.search(Board.from_fen(STARTPOS_FEN), SeedRegistry(), Color.WHITE, depth=1)
    assert res.from_book is False
    assert res.best_action is not None
