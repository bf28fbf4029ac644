import json
from dataclasses import replace

from worldopoly.core.game import TradeProposal
from worldopoly.core.game.engine import roll_dice
from worldopoly.snapshot import serialize_snapshot


def test_basic_snapshot_structure(basic_game):
    snap = serialize_snapshot(basic_game)

    # Core keys exist
    assert snap["turn_number"] == 0
    assert snap["current_player_id"] == 0
    assert snap["phase"] == "ROLL"
    assert len(snap["players"]) == 2
    assert len(snap["tiles"]) == 40
    assert snap["pending_trade"] is None
    assert snap["pending_bailout"] is None
    assert snap["winner"] is None
    assert snap["logs"] == ["Game started!"]

    # Players contain public info
    p0 = next(p for p in snap["players"] if p["player_id"] == 0)
    assert {"name", "money", "position", "is_jailed", "is_ai", "is_bankrupt", "properties"}.issubset(p0)
    assert p0["is_ai"] is False

    # The snapshot must be JSON-serializable as-is
    json.dumps(snap)


def test_tiles_expose_catalog_and_ownership(basic_game, own):
    state = own(basic_game, 1, 6, 7, 9, houses=2)

    snap = serialize_snapshot(state)

    argentina = snap["tiles"][7]
    assert argentina["name"] == "Argentina"
    assert argentina["owner_id"] == 1
    assert argentina["houses"] == 2
    assert argentina["price"] == 100
    assert argentina["group"] == "LightBlue"
    assert argentina["rent"] == [6, 30, 90, 270, 400, 550]
    assert "price" not in snap["tiles"][0]
    assert snap["players"][1]["properties"] == [6, 7, 9]


def test_hints_and_pending_decisions(basic_game, scripted, own):
    state = own(basic_game, 1, 7)
    state = roll_dice(state, scripted(3, 4))
    state = replace(state, pending_trade=TradeProposal(1, 0, 19, cash=180))

    snap = serialize_snapshot(state)

    assert snap["dice"] == [3, 4]
    assert snap["last_rent_payment"] == {"payer_id": 0, "payee_id": 1, "amount": 6}
    assert snap["pending_trade"] == {
        "initiator_id": 1,
        "target_id": 0,
        "requested_tile_id": 19,
        "offered_tile_id": None,
        "cash": 180,
    }


def test_logs_and_chat_are_trimmed(basic_game):
    state = basic_game
    for i in range(60):
        state = state.say("Alice", f"message {i}", "#fff")

    snap = serialize_snapshot(state, chat_limit=10)

    assert len(snap["chat"]) == 10
    assert snap["chat"][-1]["message"] == "message 59"
