from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from seedchess.engine.game import Game
from seedchess.protocol.http.app import create_app


PROMOTION_FEN = "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"


def _game_at(app: FastAPI, client: TestClient, fen: str) -> str:
    game_id = client.post("/api/games").json()["game_id"]
    app.state.store.get(game_id).game = Game.from_fen(fen)
    return game_id


def test_promotion_waits_for_choice() -> None:
    app = create_app()
    client = TestClient(app)
    game_id = _game_at(app, client, PROMOTION_FEN)

    state = client.post(f"/api/games/{game_id}/action", json={"action": "e7e8"}).json()
    assert state["pending_promotion"] == "e7e8"
    assert state["turn"] == "white"
    assert state["legal_actions"] == []

    r = client.post(f"/api/games/{game_id}/promotion", json={"kind": "n"})
    assert r.status_code == 200
    state = r.json()
    assert state["pending_promotion"] is None
    assert state["turn"] == "black"
    assert state["fen"].startswith("k3N3/")


def test_promotion_errors() -> None:
    app = create_app()
    client = TestClient(app)
    game_id = _game_at(app, client, PROMOTION_FEN)

    r = client.post(f"/api/games/{game_id}/promotion", json={"kind": "q"})
    assert r.status_code == 400

    client.post(f"/api/games/{game_id}/action", json={"action": "e7e8"})
    r = client.post(f"/api/games/{game_id}/promotion", json={"kind": "x"})
    assert r.status_code == 400
    r = client.post(f"/api/games/{game_id}/promotion", json={"kind": "k"})
    assert r.status_code == 400
    r = client.post(f"/api/games/{game_id}/promotion", json={"kind": "qq"})
    assert r.status_code == 422


def test_direct_promotion_notation() -> None:
    app = create_app()
    client = TestClient(app)
    game_id = _game_at(app, client, PROMOTION_FEN)
    state = client.post(f"/api/games/{game_id}/action", json={"action": "e7e8q"}).json()
    assert state["history"] == ["e7e8"]
    assert state["fen"].startswith("k3Q3/")
