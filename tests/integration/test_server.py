from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from worldopoly.core.agents import HeuristicOracle
from worldopoly.server.app import app, get_decision_oracle


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


def _create_game(client: TestClient, **overrides) -> str:
    body = {"player_name": "Alice", "seed": 7, "tick_ms": 10000}
    body.update(overrides)
    resp = client.post("/games", json=body)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert "game_id" in data and isinstance(data["game_id"], str)
    return data["game_id"]


def test_create_game_and_snapshot(client):
    gid = _create_game(client)

    snap = client.get(f"/games/{gid}/snapshot")
    assert snap.status_code == 200
    data = snap.json()

    assert data["turn_number"] == 0
    assert data["current_player_id"] == 0
    assert data["phase"] == "ROLL"
    assert [p["name"] for p in data["players"]] == ["Alice", "Llama 3.3", "Llama 8B", "Gemma 2"]
    assert [p["is_ai"] for p in data["players"]] == [False, True, True, True]
    assert len(data["tiles"]) == 40


def test_create_game_with_custom_models(client):
    gid = _create_game(client, ai_models=["gemma2-9b-it", "gemma2-9b-it"])

    data = client.get(f"/games/{gid}/snapshot").json()
    assert [p["name"] for p in data["players"]] == ["Alice", "Gemma 2", "Gemma 2 2"]


def test_create_game_validates_roster(client):
    resp = client.post("/games", json={"ai_models": ["a", "b", "c", "d"]})
    assert resp.status_code == 422

    resp = client.post("/games", json={"ai_models": []})
    assert resp.status_code == 422


def test_unknown_game_is_404(client):
    assert client.get("/games/nope/snapshot").status_code == 404
    assert client.get("/games/nope/legal_actions").status_code == 404
    assert client.post("/games/nope/actions", json={"action_type": "roll_dice"}).status_code == 404
    assert client.delete("/games/nope").status_code == 404


def test_legal_actions_and_roll(client):
    gid = _create_game(client)

    resp = client.get(f"/games/{gid}/legal_actions")
    assert resp.status_code == 200
    assert resp.json()["actions"] == [{"action_type": "roll_dice", "params": {}}]

    resp = client.get(f"/games/{gid}/legal_actions", params={"player_id": 1})
    assert resp.json()["actions"] == []

    resp = client.post(f"/games/{gid}/actions", json={"action_type": "roll_dice"})
    assert resp.status_code == 200
    assert resp.json() == {"accepted": True, "reason": None}

    data = client.get(f"/games/{gid}/snapshot").json()
    assert 2 <= sum(data["dice"]) <= 12
    assert any(line.startswith("Alice rolled") for line in data["logs"])


def test_rejected_actions(client):
    gid = _create_game(client)

    resp = client.post(f"/games/{gid}/actions", json={"action_type": "teleport"})
    assert resp.status_code == 200
    assert resp.json()["accepted"] is False
    assert "Unknown action type" in resp.json()["reason"]

    resp = client.post(f"/games/{gid}/actions", json={"action_type": "buy_property"})
    assert resp.json() == {"accepted": False, "reason": "action not legal for player"}


def test_trade_dialog_and_speed(client):
    gid = _create_game(client)

    resp = client.post(f"/games/{gid}/trade_dialog", json={"open": True})
    assert resp.status_code == 200
    assert resp.json()["trade_dialog_open"] is True
    assert resp.json()["paused"] is True

    resp = client.post(f"/games/{gid}/speed", json={"tick_ms": 500})
    assert resp.json()["tick_ms"] == 500

    status = client.get(f"/games/{gid}/status").json()
    assert status["game_id"] == gid
    assert status["game_over"] is False


def test_delete_game(client):
    gid = _create_game(client)

    resp = client.delete(f"/games/{gid}")
    assert resp.status_code == 200
    assert resp.json() == {"game_id": gid, "stopped": True}
    assert client.get(f"/games/{gid}/snapshot").status_code == 404


def test_ai_decision_endpoint(client):
    app.dependency_overrides[get_decision_oracle] = lambda: HeuristicOracle()
    try:
        resp = client.post(
            "/ai-decision",
            json={
                "decision_kind": "BUY_DECISION",
                "player": {"name": "Llama 3.3", "money": 500},
                "board_context": {"tile_name": "Argentina", "price": 100},
                "model_identifier": "llama-3.3-70b-versatile",
            },
        )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {"decision": "BUY", "reasoning": "Fallback: Have enough money with buffer"}


def test_ai_decision_rejects_bad_request(client):
    resp = client.post("/ai-decision", json={"decision_kind": "GUESS", "player": {"name": "x", "money": 1}})
    assert resp.status_code == 422
