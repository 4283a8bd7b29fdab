from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .error import HANDLERS
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.config import GameConfig, GameMode
from ...engine.errors import AIBusyError, IllegalActionError
from ...engine.game import Game
from ...engine.move import parse_action, square_to_str, str_to_square
from ...engine.piece import Color, PieceKind
from ...search.player import AIPlayer
from .session import GameSession, InMemorySessionStore


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    mode: GameMode = GameMode.CLASSIC
    ai_color: Optional[Color] = None


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    mode: GameMode


class ActionRequest(BaseModel):
    action: str = Field(..., description="Move (e2e4, e7e8q) or plant (n@d2)")


class PromotionRequest(BaseModel):
    kind: str = Field(..., min_length=1, max_length=1, description="q, r, b or n")


class SeedView(BaseModel):
    square: str
    owner: Color
    kind: str
    turns_remaining: int
    just_planted: bool


class GameStateView(BaseModel):
    game_id: str
    fen: str
    mode: GameMode
    turn: Color
    ai_color: Color
    state: str
    history: List[str]
    seeds: List[SeedView]
    pending_promotion: Optional[str]
    legal_actions: List[str]


class LegalActionsResponse(BaseModel):
    square: str
    actions: List[str]


class AIActionResponse(BaseModel):
    action: str
    from_book: bool
    score: Optional[int]
    nodes: int
    game: GameStateView


def _view(game_id: str, game: Game) -> GameStateView:
    return GameStateView(
        game_id=game_id,
        fen=game.to_fen(),
        mode=game.mode,
        turn=game.turn,
        ai_color=game.config.ai_color,
        state=game.state.value,
        history=list(game.history),
        seeds=[
            SeedView(
                square=square_to_str(s.square),
                owner=s.owner,
                kind=s.target_kind.value,
                turns_remaining=s.turns_remaining,
                just_planted=s.just_planted,
            )
            for s in game.seeds
        ],
        pending_promotion=str(game.pending_promotion) if game.pending_promotion is not None else None,
        legal_actions=[a.to_notation() for a in game.legal_actions()],
    )


def create_app(config: Optional[GameConfig] = None) -> FastAPI:
    """Build the local play API.

    Args:
        config (Optional[GameConfig]): Defaults for new games; the request
            body picks the mode and the AI's color.
    """
    base_config = config or GameConfig()
    app = FastAPI(title="Seed Chess API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    for exc_type, handler in HANDLERS.items():
        app.add_exception_handler(exc_type, handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        update = {"mode": req.mode}
        if req.ai_color is not None:
            update["ai_color"] = req.ai_color
        game_config = base_config.model_copy(update=update)
        game_id = store.create(game_config, AIPlayer(game_config))
        game = _require_session(store, game_id).game
        logger.info("game created", extra={"game_id": game_id, "mode": game.mode.value})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen(), mode=game.mode)

    @app.get("/api/games/{game_id}/state", response_model=GameStateView)
    async def get_state(game_id: str) -> GameStateView:
        return _view(game_id, _require_session(store, game_id).game)

    @app.get("/api/games/{game_id}/legal", response_model=LegalActionsResponse)
    async def legal(game_id: str, square: str = Query(..., min_length=2, max_length=2)) -> LegalActionsResponse:
        game = _require_session(store, game_id).game
        try:
            sq = str_to_square(square)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return LegalActionsResponse(
            square=square, actions=[a.to_notation() for a in game.legal_actions_for(sq)]
        )

    @app.post("/api/games/{game_id}/action", response_model=GameStateView)
    async def apply_action(game_id: str, req: ActionRequest) -> GameStateView:
        session = _require_idle_session(store, game_id)
        game = session.game
        if game.turn is session.player.config.ai_color and not game.is_over:
            raise IllegalActionError(f"it is the AI's turn ({game.turn.value})")
        try:
            action = parse_action(req.action)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        game.apply_action(action)
        return _view(game_id, game)

    @app.post("/api/games/{game_id}/promotion", response_model=GameStateView)
    async def promotion(game_id: str, req: PromotionRequest) -> GameStateView:
        game = _require_idle_session(store, game_id).game
        try:
            kind = PieceKind.from_letter(req.kind)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        game.choose_promotion(kind)
        return _view(game_id, game)

    @app.post("/api/games/{game_id}/ai", response_model=AIActionResponse)
    async def ai_action(game_id: str) -> AIActionResponse:
        session = _require_session(store, game_id)
        game = session.game
        action = await session.player.request_action(game)
        res = session.player.last_result
        return AIActionResponse(
            action=action.to_notation(),
            from_book=bool(res and res.from_book),
            score=res.score if res else None,
            nodes=res.nodes if res else 0,
            game=_view(game_id, game),
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameStateView)
    async def undo(game_id: str) -> GameStateView:
        game = _require_idle_session(store, game_id).game
        game.undo_action()
        return _view(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        session = _require_session(store, game_id)
        session.player.cancel()
        store.delete(game_id)
        logger.info("game deleted", extra={"game_id": game_id})
        return {"game_id": game_id, "status": "deleted"}

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _require_idle_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = _require_session(store, game_id)
    if session.player.busy:
        raise AIBusyError("AI is thinking; wait for its move")
    return session


# Default app for non-factory servers
app = create_app()
