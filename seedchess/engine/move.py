from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Final, Optional, Tuple

from .errors import InvariantError
from .piece import PieceKind


Square = Tuple[int, int]

PROMOTION_KINDS: Final = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)
PLANTABLE_KINDS: Final = (
    PieceKind.PAWN,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.ROOK,
    PieceKind.QUEEN,
)


class ActionKind(Enum):
    MOVE = "move"
    PLANT = "plant"


@dataclass(frozen=True)
class Action:
    """A turn-consuming action: a piece move or a seed plant.

    Attributes:
        kind (ActionKind): Move or plant.
        to_sq (Square): Destination of the move, or the square planted on.
        from_sq (Optional[Square]): Origin of a move; ``None`` for plants.
        promotion (Optional[PieceKind]): Chosen promotion kind, if any. Legal
            action lists leave it unset; interactive callers fill it in.
        plant_kind (Optional[PieceKind]): Piece the seed will hatch into.
    """

    kind: ActionKind
    to_sq: Square
    from_sq: Optional[Square] = None
    promotion: Optional[PieceKind] = None
    plant_kind: Optional[PieceKind] = None

    @classmethod
    def move(cls, from_sq: Square, to_sq: Square, promotion: Optional[PieceKind] = None) -> "Action":
        return cls(ActionKind.MOVE, to_sq, from_sq=from_sq, promotion=promotion)

    @classmethod
    def plant(cls, square: Square, kind: PieceKind) -> "Action":
        if kind not in PLANTABLE_KINDS:
            raise ValueError(f"cannot plant a seed of kind {kind.value!r}")
        return cls(ActionKind.PLANT, square, plant_kind=kind)

    @property
    def is_plant(self) -> bool:
        return self.kind is ActionKind.PLANT

    def with_promotion(self, kind: PieceKind) -> "Action":
        if kind not in PROMOTION_KINDS:
            raise ValueError(f"invalid promotion kind: {kind.value!r}")
        return replace(self, promotion=kind)

    def same_squares(self, other: "Action") -> bool:
        """True if both actions denote the same move or plant, ignoring promotion."""
        return (
            self.kind is other.kind
            and self.from_sq == other.from_sq
            and self.to_sq == other.to_sq
            and self.plant_kind == other.plant_kind
        )

    def to_notation(self) -> str:
        """Serialize into ``"e2e4"``, ``"e7e8q"`` or ``"n@d2"`` form."""
        if self.is_plant:
            assert self.plant_kind is not None
            return f"{self.plant_kind.letter}@{square_to_str(self.to_sq)}"
        assert self.from_sq is not None
        promo = self.promotion.letter if self.promotion is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo

    def __str__(self) -> str:
        return self.to_notation()


def parse_action(text: str) -> Action:
    """Parse move (``"e2e4"``, ``"e7e8q"``) or plant (``"n@d2"``) notation.

    Raises:
        ValueError: If the text is not a well-formed action.
    """
    text = text.strip()
    if "@" in text:
        letter, _, sq = text.partition("@")
        if len(letter) != 1:
            raise ValueError(f"invalid plant action: {text!r}")
        return Action.plant(str_to_square(sq), PieceKind.from_letter(letter))
    if len(text) not in (4, 5):
        raise ValueError(f"invalid move length: {text!r}")
    from_sq = str_to_square(text[0:2])
    to_sq = str_to_square(text[2:4])
    promo: Optional[PieceKind] = None
    if len(text) == 5:
        promo = PieceKind.from_letter(text[4])
        if promo not in PROMOTION_KINDS:
            raise ValueError(f"invalid promotion piece: {text[4]!r}")
    return Action.move(from_sq, to_sq, promo)


def in_bounds(file: int, rank: int) -> bool:
    return 0 <= file < 8 and 0 <= rank < 8


def validate_square(sq: Square) -> Square:
    """Return ``sq`` unchanged, or raise if it lies off the 8x8 board.

    Raises:
        InvariantError: If either coordinate is outside 0..7.
    """
    file, rank = sq
    if not in_bounds(file, rank):
        raise InvariantError(f"square out of range: {sq!r}")
    return sq


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a ``(file, rank)`` pair.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: Zero-based ``(file, rank)``.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    return ord(s[0]) - ord("a"), int(s[1]) - 1


def square_to_str(sq: Square) -> str:
    """Convert a ``(file, rank)`` pair into algebraic notation.

    Raises:
        ValueError: If ``sq`` is outside the board.
    """
    file, rank = sq
    if not in_bounds(file, rank):
        raise ValueError(f"invalid square: {sq!r}")
    return chr(ord("a") + file) + str(rank + 1)


def move_key(from_sq: Square, to_sq: Square) -> str:
    """Book notation for a move: origin then destination, no separator."""
    return square_to_str(from_sq) + square_to_str(to_sq)
