from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Final, Tuple


class PieceKind(Enum):
    NONE = "none"
    PAWN = "pawn"
    ROOK = "rook"
    KNIGHT = "knight"
    BISHOP = "bishop"
    QUEEN = "queen"
    KING = "king"

    @property
    def letter(self) -> str:
        """Lowercase notation letter (``"n"`` for knights, ``"s"`` for seeds)."""
        return KIND_TO_LETTER[self]

    @classmethod
    def from_letter(cls, ch: str) -> "PieceKind":
        try:
            return LETTER_TO_KIND[ch.lower()]
        except KeyError:
            raise ValueError(f"invalid piece letter: {ch!r}") from None


class Color(Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        # Rank direction pawns of this color advance in
        return 1 if self is Color.WHITE else -1

    @property
    def pawn_start_rank(self) -> int:
        return 1 if self is Color.WHITE else 6

    @property
    def promotion_rank(self) -> int:
        return 7 if self is Color.WHITE else 0

    @property
    def back_rank(self) -> int:
        return 0 if self is Color.WHITE else 7


KIND_TO_LETTER: Final[Dict[PieceKind, str]] = {
    PieceKind.NONE: "s",
    PieceKind.PAWN: "p",
    PieceKind.ROOK: "r",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
LETTER_TO_KIND: Final[Dict[str, PieceKind]] = {v: k for k, v in KIND_TO_LETTER.items()}

# Material values in centipawns
PIECE_VALUES: Final[Dict[PieceKind, int]] = {
    PieceKind.PAWN: 100,
    PieceKind.KNIGHT: 320,
    PieceKind.BISHOP: 330,
    PieceKind.ROOK: 500,
    PieceKind.QUEEN: 900,
    PieceKind.KING: 20000,
}


@dataclass(eq=False)
class Piece:
    """A piece entity on the board.

    Compared by identity: make/unmake must hand back the very same object, not
    an equal copy. A seed marker is ``kind=NONE`` with ``is_seed=True``.
    """

    kind: PieceKind
    color: Color
    square: Tuple[int, int]
    has_moved: bool = False
    is_seed: bool = False

    @classmethod
    def seed_marker(cls, color: Color, square: Tuple[int, int]) -> "Piece":
        return cls(PieceKind.NONE, color, square, has_moved=False, is_seed=True)

    def symbol(self) -> str:
        """FEN-style symbol: uppercase for White, ``s``/``S`` for seed markers."""
        ch = self.kind.letter
        return ch.upper() if self.color is Color.WHITE else ch

    def snapshot(self) -> Tuple[str, str, Tuple[int, int], bool, bool]:
        return (self.kind.value, self.color.value, self.square, self.has_moved, self.is_seed)

    def copy(self) -> "Piece":
        return Piece(self.kind, self.color, self.square, self.has_moved, self.is_seed)
