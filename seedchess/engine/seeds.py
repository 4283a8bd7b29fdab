from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Final, Iterator, List, Optional, Tuple

from .board import Board
from .errors import InvariantError
from .move import PLANTABLE_KINDS, Square, in_bounds, square_to_str, validate_square
from .piece import Color, Piece, PieceKind


# Turns of the owner before a seed hatches
GROWTH_TURNS: Final[Dict[PieceKind, int]] = {
    PieceKind.PAWN: 1,
    PieceKind.KNIGHT: 3,
    PieceKind.BISHOP: 3,
    PieceKind.ROOK: 5,
    PieceKind.QUEEN: 9,
}


@dataclass
class Seed:
    square: Square
    owner: Color
    target_kind: PieceKind
    turns_remaining: int
    just_planted: bool = True

    def snapshot(self) -> Tuple[Square, str, str, int, bool]:
        return (self.square, self.owner.value, self.target_kind.value, self.turns_remaining, self.just_planted)

    def copy(self) -> "Seed":
        return Seed(self.square, self.owner, self.target_kind, self.turns_remaining, self.just_planted)


@dataclass
class TickUndo:
    """Reverses one ``SeedRegistry.end_turn`` call."""

    color: Color
    # (seed, turns_remaining before, just_planted before)
    touched: List[Tuple[Seed, int, bool]] = field(default_factory=list)
    # (index at removal, seed, marker removed, hatched piece), in removal order
    hatched: List[Tuple[int, Seed, Piece, Piece]] = field(default_factory=list)


class SeedRegistry:
    """Ordered list of pending seeds for both players.

    Each seed sits under a seed marker of the same owner on the board. The
    registry owned by a ``Game`` is the live one; the search works on a
    clone and never touches it.
    """

    def __init__(self, seeds: Optional[List[Seed]] = None) -> None:
        self._seeds: List[Seed] = list(seeds or [])

    def __iter__(self) -> Iterator[Seed]:
        return iter(self._seeds)

    def __len__(self) -> int:
        return len(self._seeds)

    def seeds_of(self, color: Color) -> List[Seed]:
        return [s for s in self._seeds if s.owner is color]

    def has_any_seed(self, color: Color) -> bool:
        return any(s.owner is color for s in self._seeds)

    def seed_at(self, square: Square) -> Optional[Seed]:
        for s in self._seeds:
            if s.square == square:
                return s
        return None

    def plant(self, board: Board, square: Square, owner: Color, kind: PieceKind) -> Seed:
        """Register a new seed, placing its marker if the square is still empty.

        A marker of the same owner already on ``square`` (left by
        ``Board.make_move`` or loaded from FEN) is adopted as is.

        Raises:
            ValueError: If ``kind`` cannot be planted.
            InvariantError: If the square is occupied by anything else or
                already carries a seed.
        """
        validate_square(square)
        if kind not in PLANTABLE_KINDS:
            raise ValueError(f"cannot plant a seed of kind {kind.value!r}")
        if self.seed_at(square) is not None:
            raise InvariantError(f"square {square_to_str(square)} already carries a seed")
        occupant = board.piece_at(square)
        if occupant is None:
            board.put(Piece.seed_marker(owner, square))
        elif not (occupant.is_seed and occupant.color is owner):
            raise InvariantError(f"cannot plant on occupied square {square_to_str(square)}")
        seed = Seed(square, owner, kind, GROWTH_TURNS[kind], just_planted=True)
        self._seeds.append(seed)
        return seed

    def pop(self, seed: Seed) -> None:
        """Drop the most recently planted seed; the caller removes the marker."""
        if not self._seeds or self._seeds[-1] is not seed:
            raise InvariantError("seed to pop is not the most recent plant")
        self._seeds.pop()

    def remove_at(self, square: Square) -> Optional[Tuple[int, Seed]]:
        """Remove the seed on ``square`` (its marker was captured)."""
        for i in range(len(self._seeds) - 1, -1, -1):
            if self._seeds[i].square == square:
                return i, self._seeds.pop(i)
        return None

    def restore(self, index: int, seed: Seed) -> None:
        self._seeds.insert(index, seed)

    def end_turn(self, color: Color, board: Board) -> TickUndo:
        """Advance the seeds of ``color`` at the end of its turn.

        A freshly planted seed only loses its ``just_planted`` flag. Others
        count down and hatch at zero: the marker is replaced by a real piece,
        flagged as moved unless it is a pawn.

        Returns:
            TickUndo: Record consumed by :meth:`untick`.
        """
        undo = TickUndo(color)
        to_hatch: List[Seed] = []
        for seed in self._seeds:
            if seed.owner is not color:
                continue
            undo.touched.append((seed, seed.turns_remaining, seed.just_planted))
            if seed.just_planted:
                seed.just_planted = False
                continue
            seed.turns_remaining -= 1
            if seed.turns_remaining <= 0:
                to_hatch.append(seed)
        for seed in to_hatch:
            index = next(i for i, s in enumerate(self._seeds) if s is seed)
            marker = board.take(seed.square)
            if marker is None or not marker.is_seed or marker.color is not seed.owner:
                raise InvariantError(f"seed on {square_to_str(seed.square)} has no matching marker")
            piece = Piece(
                seed.target_kind,
                seed.owner,
                seed.square,
                has_moved=seed.target_kind is not PieceKind.PAWN,
            )
            board.put(piece)
            self._seeds.pop(index)
            undo.hatched.append((index, seed, marker, piece))
        return undo

    def untick(self, board: Board, undo: TickUndo) -> None:
        for index, seed, marker, piece in reversed(undo.hatched):
            if board.take(seed.square) is not piece:
                raise InvariantError(f"hatched piece on {square_to_str(seed.square)} was disturbed")
            board.put(marker)
            self._seeds.insert(index, seed)
        for seed, turns, just in undo.touched:
            seed.turns_remaining = turns
            seed.just_planted = just

    def verify(self, board: Board) -> None:
        """Check the seed/marker pairing in both directions.

        Raises:
            InvariantError: On a seed without its marker or a stray marker.
        """
        squares = set()
        for seed in self._seeds:
            marker = board.piece_at(seed.square)
            if marker is None or not marker.is_seed or marker.color is not seed.owner:
                raise InvariantError(f"seed on {square_to_str(seed.square)} has no matching marker")
            squares.add(seed.square)
        for marker in board.seed_markers():
            if marker.square not in squares:
                raise InvariantError(f"marker on {square_to_str(marker.square)} has no seed")

    def clone(self) -> "SeedRegistry":
        return SeedRegistry([s.copy() for s in self._seeds])

    def snapshot(self) -> Tuple:
        return tuple(s.snapshot() for s in self._seeds)


def plantable_squares(king: Piece, board: Board) -> List[Square]:
    """Empty squares around ``king``; seed markers block planting."""
    out: List[Square] = []
    kf, kr = king.square
    for df in (-1, 0, 1):
        for dr in (-1, 0, 1):
            if df == 0 and dr == 0:
                continue
            f, r = kf + df, kr + dr
            if in_bounds(f, r) and board.grid[f][r] is None:
                out.append((f, r))
    return out
