from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .config import GameMode
from .errors import InvariantError
from .move import Action, Square, square_to_str, str_to_square, validate_square
from .piece import Color, Piece, PieceKind


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
SEED_START_FEN = "4k3/8/8/8/8/8/8/4K3 w - - 0 1"

Grid = List[List[Optional[Piece]]]


@dataclass
class MoveUndo:
    """Everything needed to reverse one ``Board.make_move`` exactly."""

    action: Action
    color: Color
    prev_ep: Optional[Square]
    piece: Optional[Piece] = None
    had_moved: bool = False
    captured: Optional[Piece] = None
    ep_victim: Optional[Piece] = None
    rook: Optional[Piece] = None
    rook_from: Optional[Square] = None
    rook_had_moved: bool = False
    promoted_from: Optional[PieceKind] = None
    marker: Optional[Piece] = None

    @property
    def is_castle(self) -> bool:
        return self.rook is not None

    @property
    def is_capture(self) -> bool:
        return self.ep_victim is not None or (self.captured is not None and not self.captured.is_seed)


def _empty_grid() -> Grid:
    return [[None for _ in range(8)] for _ in range(8)]


@dataclass
class Board:
    """8x8 grid of pieces and seed markers plus the en-passant target.

    Notes:
    - ``grid[file][rank]``, a1 = (0, 0), h8 = (7, 7).
    - Side to move and turn bookkeeping belong to ``Game``, not the board.
    """

    grid: Grid = field(default_factory=_empty_grid)
    ep_target: Optional[Square] = None
    # make/unmake stack
    _history: List[MoveUndo] = field(default_factory=list, repr=False)

    @classmethod
    def startpos(cls) -> "Board":
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def setup(cls, mode: GameMode) -> "Board":
        """Initial position for ``mode``: full army, or only the kings for Seed Chess."""
        return cls.from_fen(SEED_START_FEN if mode is GameMode.SEED else STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a FEN string extended with seed markers.

        ``S``/``s`` denote White/Black seed markers. The castling field is
        mapped onto rook ``has_moved`` flags; kings count as unmoved only on
        their home square and pawns only on their starting rank.

        Args:
            fen (str): Six-field FEN, or the placement field alone.

        Returns:
            Board: Board initialized with the encoded placement and
                en-passant target. The side to move is not stored.

        Raises:
            ValueError: If ``fen`` is empty or malformed.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) == 1:
            parts += ["w", "-", "-", "0", "1"]
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = cls()
        for rank_idx, row in enumerate(ranks[::-1]):
            file_idx = 0
            for ch in row:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                    continue
                if file_idx >= 8:
                    raise ValueError("too many squares in FEN rank")
                kind = PieceKind.from_letter(ch)
                color = Color.WHITE if ch.isupper() else Color.BLACK
                sq = (file_idx, rank_idx)
                if kind is PieceKind.NONE:
                    board.grid[file_idx][rank_idx] = Piece.seed_marker(color, sq)
                else:
                    board.grid[file_idx][rank_idx] = Piece(kind, color, sq)
                file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        if castling != "-" and any(ch not in "KQkq" for ch in castling):
            raise ValueError("invalid castling rights")
        rights = "" if castling == "-" else castling

        if ep == "-":
            board.ep_target = None
        else:
            try:
                board.ep_target = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if board.ep_target[1] not in (2, 5):
                raise ValueError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        board._init_moved_flags(rights)
        return board

    def _init_moved_flags(self, rights: str) -> None:
        unmoved_rooks = set()
        for ch, sq in (("K", (7, 0)), ("Q", (0, 0)), ("k", (7, 7)), ("q", (0, 7))):
            if ch in rights:
                unmoved_rooks.add(sq)
        for piece in self.pieces():
            if piece.kind is PieceKind.PAWN:
                piece.has_moved = piece.square[1] != piece.color.pawn_start_rank
            elif piece.kind is PieceKind.KING:
                piece.has_moved = piece.square != (4, piece.color.back_rank)
            elif piece.kind is PieceKind.ROOK:
                piece.has_moved = piece.square not in unmoved_rooks

    def to_fen(self, side_to_move: Color = Color.WHITE) -> str:
        """Serialize into FEN with ``s``/``S`` seed markers.

        Castling rights are derived from the unmoved king and rook flags.
        Move counters are not tracked and are written as ``0 1``.
        """
        rows: List[str] = []
        for rank in range(7, -1, -1):
            run = 0
            row = []
            for file in range(8):
                p = self.grid[file][rank]
                if p is None:
                    run += 1
                    continue
                if run:
                    row.append(str(run))
                    run = 0
                row.append(p.symbol())
            if run:
                row.append(str(run))
            rows.append("".join(row))
        stm = "w" if side_to_move is Color.WHITE else "b"
        ep = square_to_str(self.ep_target) if self.ep_target is not None else "-"
        return f"{'/'.join(rows)} {stm} {self._castling_field()} {ep} 0 1"

    def _castling_field(self) -> str:
        out = ""
        for color, letters in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
            rank = color.back_rank
            king = self.grid[4][rank]
            if king is None or king.is_seed or king.kind is not PieceKind.KING or king.color is not color:
                continue
            if king.has_moved:
                continue
            for letter, rook_file in zip(letters, (7, 0)):
                rook = self.grid[rook_file][rank]
                if (
                    rook is not None
                    and rook.kind is PieceKind.ROOK
                    and rook.color is color
                    and not rook.has_moved
                ):
                    out += letter
        return out or "-"

    # --- Queries ---
    def piece_at(self, sq: Square) -> Optional[Piece]:
        file, rank = validate_square(sq)
        return self.grid[file][rank]

    def is_empty(self, sq: Square) -> bool:
        """True only if the square holds neither a piece nor a seed marker."""
        return self.piece_at(sq) is None

    def pieces(self, color: Optional[Color] = None, include_seeds: bool = False) -> Iterator[Piece]:
        """Iterate pieces file by file (a..h), rank 1..8 within each file."""
        for file in range(8):
            for rank in range(8):
                p = self.grid[file][rank]
                if p is None or (p.is_seed and not include_seeds):
                    continue
                if color is not None and p.color is not color:
                    continue
                yield p

    def seed_markers(self, color: Optional[Color] = None) -> Iterator[Piece]:
        for p in self.pieces(color, include_seeds=True):
            if p.is_seed:
                yield p

    def find_king(self, color: Color) -> Optional[Piece]:
        for p in self.pieces(color):
            if p.kind is PieceKind.KING:
                return p
        return None

    def snapshot(self) -> Tuple:
        """Structural value of the position, for equality checks."""
        cells = tuple(
            self.grid[f][r].snapshot() if self.grid[f][r] is not None else None
            for f in range(8)
            for r in range(8)
        )
        return cells, self.ep_target

    def copy(self) -> "Board":
        """Deep copy of grid and en-passant target with an empty history."""
        clone = Board(ep_target=self.ep_target)
        for p in self.pieces(include_seeds=True):
            file, rank = p.square
            clone.grid[file][rank] = p.copy()
        return clone

    @property
    def history_depth(self) -> int:
        return len(self._history)

    # --- Low-level placement (hatching) ---
    def put(self, piece: Piece) -> None:
        file, rank = validate_square(piece.square)
        if self.grid[file][rank] is not None:
            raise InvariantError(f"square {square_to_str(piece.square)} is occupied")
        self.grid[file][rank] = piece

    def take(self, sq: Square) -> Optional[Piece]:
        file, rank = validate_square(sq)
        p = self.grid[file][rank]
        self.grid[file][rank] = None
        return p

    @contextmanager
    def relocated(self, piece: Piece, to_sq: Square) -> Iterator[None]:
        """Temporarily move ``piece`` to an empty square, restoring it on exit.

        No flags, captures or en-passant state are touched.
        """
        from_sq = piece.square
        if self.piece_at(from_sq) is not piece or not self.is_empty(to_sq):
            raise InvariantError("relocation requires the piece on its square and an empty target")
        self.grid[from_sq[0]][from_sq[1]] = None
        self.grid[to_sq[0]][to_sq[1]] = piece
        piece.square = to_sq
        try:
            yield
        finally:
            self.grid[to_sq[0]][to_sq[1]] = None
            self.grid[from_sq[0]][from_sq[1]] = piece
            piece.square = from_sq

    # --- Make / unmake ---
    def make_move(self, action: Action, color: Color) -> MoveUndo:
        """Apply ``action`` for ``color`` in place with reversible state.

        Handles plain moves, captures (seed markers included), en passant,
        castling rook motion, promotion (QUEEN when no kind is given) and
        seed-marker placement for plants. The en-passant target is cleared
        unless this action is a pawn double step.

        Args:
            action (Action): Move or plant to apply. Legality is not checked.
            color (Color): Side performing the action.

        Returns:
            MoveUndo: Record consumed by :meth:`unmake_move`.

        Raises:
            InvariantError: If a square is off the board, the origin holds no
                piece of ``color``, or a plant targets an occupied square.
        """
        undo = MoveUndo(action=action, color=color, prev_ep=self.ep_target)
        to_sq = validate_square(action.to_sq)

        if action.is_plant:
            if not self.is_empty(to_sq):
                raise InvariantError(f"cannot plant on occupied square {square_to_str(to_sq)}")
            marker = Piece.seed_marker(color, to_sq)
            self.grid[to_sq[0]][to_sq[1]] = marker
            undo.marker = marker
            self.ep_target = None
            self._history.append(undo)
            return undo

        if action.from_sq is None:
            raise InvariantError("move action without origin square")
        from_sq = validate_square(action.from_sq)
        piece = self.grid[from_sq[0]][from_sq[1]]
        if piece is None or piece.is_seed or piece.color is not color:
            raise InvariantError(f"no {color.value} piece on {square_to_str(from_sq)}")
        undo.piece = piece
        undo.had_moved = piece.has_moved

        if (
            piece.kind is PieceKind.PAWN
            and self.ep_target == to_sq
            and from_sq[0] != to_sq[0]
        ):
            victim = self.grid[to_sq[0]][from_sq[1]]
            if victim is not None and not victim.is_seed and victim.color is not color:
                self.grid[to_sq[0]][from_sq[1]] = None
                undo.ep_victim = victim

        if piece.kind is PieceKind.KING and abs(to_sq[0] - from_sq[0]) == 2:
            kingside = to_sq[0] > from_sq[0]
            rook_from = (7 if kingside else 0, from_sq[1])
            rook_to = (to_sq[0] - 1 if kingside else to_sq[0] + 1, from_sq[1])
            rook = self.grid[rook_from[0]][rook_from[1]]
            if rook is None or rook.kind is not PieceKind.ROOK or rook.color is not color:
                raise InvariantError("castling without a rook in the corner")
            undo.rook = rook
            undo.rook_from = rook_from
            undo.rook_had_moved = rook.has_moved
            self.grid[rook_from[0]][rook_from[1]] = None
            self.grid[rook_to[0]][rook_to[1]] = rook
            rook.square = rook_to
            rook.has_moved = True

        undo.captured = self.grid[to_sq[0]][to_sq[1]]
        self.grid[from_sq[0]][from_sq[1]] = None
        self.grid[to_sq[0]][to_sq[1]] = piece
        piece.square = to_sq
        piece.has_moved = True

        if piece.kind is PieceKind.PAWN and to_sq[1] == color.promotion_rank:
            undo.promoted_from = PieceKind.PAWN
            piece.kind = action.promotion if action.promotion is not None else PieceKind.QUEEN

        if piece.kind is PieceKind.PAWN and abs(to_sq[1] - from_sq[1]) == 2:
            self.ep_target = (from_sq[0], from_sq[1] + color.forward)
        else:
            self.ep_target = None

        self._history.append(undo)
        return undo

    def unmake_move(self, undo: Optional[MoveUndo] = None) -> None:
        """Undo the most recent ``make_move`` in place.

        Raises:
            InvariantError: If nothing is left to unmake, or ``undo`` is given
                and is not the most recent record.
        """
        if not self._history:
            raise InvariantError("no move to unmake")
        if undo is not None and self._history[-1] is not undo:
            raise InvariantError("unmake does not match the last make")
        rec = self._history.pop()
        self.ep_target = rec.prev_ep
        to_sq = rec.action.to_sq

        if rec.marker is not None:
            self.grid[to_sq[0]][to_sq[1]] = None
            return

        piece = rec.piece
        assert piece is not None and rec.action.from_sq is not None
        from_sq = rec.action.from_sq
        if rec.promoted_from is not None:
            piece.kind = rec.promoted_from
        self.grid[to_sq[0]][to_sq[1]] = rec.captured
        self.grid[from_sq[0]][from_sq[1]] = piece
        piece.square = from_sq
        piece.has_moved = rec.had_moved

        if rec.rook is not None and rec.rook_from is not None:
            rook = rec.rook
            self.grid[rook.square[0]][rook.square[1]] = None
            self.grid[rec.rook_from[0]][rec.rook_from[1]] = rook
            rook.square = rec.rook_from
            rook.has_moved = rec.rook_had_moved

        if rec.ep_victim is not None:
            victim = rec.ep_victim
            self.grid[victim.square[0]][victim.square[1]] = victim
