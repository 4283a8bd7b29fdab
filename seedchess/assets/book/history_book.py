from __future__ import annotations

import json
import os
import random
from typing import Dict, List, Optional, Sequence, Tuple

from ...engine.move import Square, str_to_square


DEFAULT_BOOK_PATH = os.path.join(os.path.dirname(__file__), "default_book.json")

BookMove = Tuple[Square, Square]


def _parse_book_move(text: str) -> BookMove:
    if not isinstance(text, str) or len(text) != 4:
        raise ValueError(f"invalid book move: {text!r}")
    return str_to_square(text[0:2]), str_to_square(text[2:4])


class HistoryBook:
    """Opening book keyed by the exact move history of the game.

    Format: a JSON object mapping comma-joined history (``"e2e4,e7e5"``) to a
    list of candidate replies in the same notation.

    Notes:
    - Only exact matches count; there is no prefix or transposition lookup.
    - Candidates are picked uniformly at random with the caller's RNG.
    - Legality of the reply is left to the caller.
    """

    def __init__(self, lines: Dict[str, List[str]]) -> None:
        self._index: Dict[str, List[BookMove]] = {}
        for key, moves in lines.items():
            if not isinstance(moves, list):
                raise ValueError(f"book entry {key!r} must be a list")
            self._index[str(key).strip()] = [_parse_book_move(m) for m in moves]

    @classmethod
    def from_json(cls, path: str) -> "HistoryBook":
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("invalid book format")
        return cls(data)

    @classmethod
    def default(cls) -> "HistoryBook":
        return cls.from_json(DEFAULT_BOOK_PATH)

    def __len__(self) -> int:
        return len(self._index)

    def candidates(self, history: Sequence[str]) -> List[BookMove]:
        return list(self._index.get(",".join(history), []))

    def find(self, history: Sequence[str], rng: Optional[random.Random] = None) -> Optional[BookMove]:
        """Return a book reply for ``history`` or ``None`` when out of book.

        Args:
            history (Sequence[str]): Moves played so far, ``"e2e4"`` style.
            rng (Optional[random.Random]): Source of the uniform pick; the
                module-level generator is used when omitted.

        Returns:
            Optional[BookMove]: ``(from_sq, to_sq)`` of the chosen reply.
        """
        cands = self._index.get(",".join(history))
        if not cands:
            return None
        return (rng or random).choice(cands)
