from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from . import rules
from .board import Board
from .config import GameConfig, GameMode
from .errors import IllegalActionError
from .move import PROMOTION_KINDS, Action, Square, move_key, validate_square
from .piece import Color, PieceKind
from .rules import GameState, TurnUndo
from .seeds import SeedRegistry


logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]
ActionListener = Callable[[Action], None]


@dataclass
class Game:
    """Owner of the live board, seeds and turn order.

    Responsibility: answer legal-action queries for the side to move, apply
    actions, end turns (seed ticks, turn switch, state recompute) and notify
    listeners.
    """

    config: GameConfig = field(default_factory=GameConfig)
    board: Board = field(default_factory=Board.startpos)
    seeds: SeedRegistry = field(default_factory=SeedRegistry)
    turn: Color = Color.WHITE
    state: GameState = GameState.PLAYING
    history: List[str] = field(default_factory=list)
    pending_promotion: Optional[Action] = None
    on_state_changed: List[StateListener] = field(default_factory=list, repr=False)
    on_action_applied: List[ActionListener] = field(default_factory=list, repr=False)
    _undo_stack: List[TurnUndo] = field(default_factory=list, repr=False)
    _actions: List[Action] = field(default_factory=list, repr=False)

    @classmethod
    def new(cls, config: Optional[GameConfig] = None) -> "Game":
        config = config or GameConfig()
        return cls(config=config, board=Board.setup(config.mode))

    @classmethod
    def from_fen(
        cls, fen: str, config: Optional[GameConfig] = None, seeds: Optional[SeedRegistry] = None
    ) -> "Game":
        """Load a position; the FEN side-to-move field sets the turn.

        Seed markers in the FEN need matching records in ``seeds``.

        Raises:
            ValueError: If the FEN is malformed.
            InvariantError: If seeds and markers do not pair up.
        """
        board = Board.from_fen(fen)
        parts = fen.split()
        turn = Color.BLACK if len(parts) > 1 and parts[1] == "b" else Color.WHITE
        seeds = seeds if seeds is not None else SeedRegistry()
        seeds.verify(board)
        game = cls(config=config or GameConfig(), board=board, seeds=seeds, turn=turn)
        game.state = rules.classify(turn, board, game.mode)
        return game

    def to_fen(self) -> str:
        return self.board.to_fen(self.turn)

    @property
    def mode(self) -> GameMode:
        return self.config.mode

    @property
    def is_over(self) -> bool:
        return self.state.is_over

    @property
    def actions(self) -> List[Action]:
        """Actions applied so far, oldest first."""
        return list(self._actions)

    def legal_actions(self) -> List[Action]:
        if self.is_over or self.pending_promotion is not None:
            return []
        return rules.all_legal_actions(self.turn, self.board, self.mode)

    def legal_actions_for(self, square: Square) -> List[Action]:
        """Legal actions of the piece on ``square``; a king also lists its plants.

        Empty when the square holds no piece of the side to move.
        """
        validate_square(square)
        if self.is_over or self.pending_promotion is not None:
            return []
        piece = self.board.piece_at(square)
        if piece is None or piece.is_seed or piece.color is not self.turn:
            return []
        out = rules.legal_actions(piece, self.board)
        if piece.kind is PieceKind.KING and self.mode is GameMode.SEED:
            out.extend(rules.plant_actions(self.turn, self.board))
        return out

    def _match_legal(self, action: Action) -> Action:
        for legal in self.legal_actions():
            if legal.same_squares(action):
                return action
        raise IllegalActionError(f"illegal action: {action}")

    def apply_action(self, action: Action) -> bool:
        """Apply an action for the side to move.

        A promotion move without a kind is held back until
        :meth:`choose_promotion` supplies one; the board is unchanged meanwhile.

        Returns:
            bool: True if the turn completed, False if a promotion is pending.

        Raises:
            IllegalActionError: If the game is over, a promotion is pending, or
                the action is not legal for the side to move.
        """
        if self.is_over:
            raise IllegalActionError("game is over")
        if self.pending_promotion is not None:
            raise IllegalActionError("promotion choice pending")
        action = self._match_legal(action)
        if rules.is_promotion(action, self.board):
            if action.promotion is None:
                self.pending_promotion = action
                logger.info("promotion pending", extra={"action": str(action)})
                return False
        elif action.promotion is not None:
            raise IllegalActionError(f"not a promotion move: {action}")
        self._complete(action)
        return True

    def try_apply_action(self, action: Action) -> bool:
        """Like :meth:`apply_action` but ignores illegal input.

        Returns:
            bool: False when the action was rejected or awaits a promotion.
        """
        try:
            return self.apply_action(action)
        except IllegalActionError as e:
            logger.debug("ignored action", extra={"action": str(action), "reason": str(e)})
            return False

    def choose_promotion(self, kind: PieceKind) -> None:
        """Finish a pending promotion with ``kind`` (queen, rook, bishop or knight).

        Raises:
            IllegalActionError: If nothing is pending or the kind is invalid.
        """
        if self.pending_promotion is None:
            raise IllegalActionError("no promotion pending")
        if kind not in PROMOTION_KINDS:
            raise IllegalActionError(f"invalid promotion kind: {kind.value}")
        action = self.pending_promotion.with_promotion(kind)
        self.pending_promotion = None
        self._complete(action)

    def cancel_promotion(self) -> None:
        self.pending_promotion = None

    def _complete(self, action: Action) -> None:
        mover = self.turn
        undo = rules.apply_action(
            self.board,
            self.seeds,
            action,
            mover,
            end_turn=self.mode is GameMode.SEED,
        )
        self._undo_stack.append(undo)
        self._actions.append(action)
        if action.is_plant:
            self.history.append(action.to_notation())
        else:
            assert action.from_sq is not None
            self.history.append(move_key(action.from_sq, action.to_sq))
        self.turn = mover.opponent
        logger.info("action applied", extra={"action": str(action), "color": mover.value})
        for cb in list(self.on_action_applied):
            cb(action)
        self._set_state(rules.classify(self.turn, self.board, self.mode))

    def _set_state(self, state: GameState) -> None:
        prev = self.state
        self.state = state
        if state is not prev:
            logger.info("state changed", extra={"state": state.value, "turn": self.turn.value})
        for cb in list(self.on_state_changed):
            cb(state)

    def undo_action(self) -> Action:
        """Take back the last completed turn, restoring board, seeds and turn.

        Raises:
            IllegalActionError: If there is nothing to undo.
        """
        self.pending_promotion = None
        if not self._undo_stack:
            raise IllegalActionError("no action to undo")
        undo = self._undo_stack.pop()
        action = self._actions.pop()
        self.history.pop()
        rules.undo_action(self.board, self.seeds, undo)
        self.turn = self.turn.opponent
        logger.info("action undone", extra={"action": str(action)})
        self._set_state(rules.classify(self.turn, self.board, self.mode))
        return action
