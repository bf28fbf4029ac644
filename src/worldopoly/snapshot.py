"""
Public snapshot serialization of GameState.

Produces a stable, JSON-safe view of the current game for the UI and the
HTTP API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from worldopoly.core.game.state import GameState

RECENT_LOGS = 50
RECENT_CHAT = 50


def serialize_snapshot(game: GameState, log_limit: int = RECENT_LOGS, chat_limit: int = RECENT_CHAT) -> Dict[str, Any]:
    """Serialize a GameState into a public, stable JSON dict.

    The snapshot includes:
    - turn_number, phase, dice and current_player_id
    - players with public info (money, position, jail, portfolio)
    - every tile with its owner and house count
    - pending trade / bailout decisions and the last-event hints
    - the most recent log lines and chat messages
    """
    players: List[Dict[str, Any]] = []
    for player in game.players:
        players.append(
            {
                "player_id": player.id,
                "name": player.name,
                "color": player.color,
                "money": player.money,
                "position": player.position,
                "is_jailed": player.is_jailed,
                "jail_turns": player.jail_turns,
                "is_ai": player.is_ai,
                "is_bankrupt": player.is_bankrupt,
                "bailout_count": player.bailout_count,
                "properties": sorted(player.properties),
                "trade_blacklist": sorted(player.trade_blacklist),
            }
        )

    tiles: List[Dict[str, Any]] = []
    for tile in game.board:
        entry: Dict[str, Any] = {
            "id": tile.id,
            "name": tile.name,
            "type": tile.type.value,
            "owner_id": tile.owner_id,
            "houses": tile.houses,
        }
        if tile.is_purchasable:
            entry["price"] = tile.price
            entry["group"] = tile.group
        if tile.is_buildable:
            entry["house_cost"] = tile.house_cost
            entry["rent"] = list(tile.rent)
        tiles.append(entry)

    pending_trade: Optional[Dict[str, Any]] = None
    if game.pending_trade is not None:
        t = game.pending_trade
        pending_trade = {
            "initiator_id": t.initiator_id,
            "target_id": t.target_id,
            "requested_tile_id": t.requested_tile_id,
            "offered_tile_id": t.offered_tile_id,
            "cash": t.cash,
        }

    hints: Dict[str, Any] = {
        "last_drawn_card": None,
        "last_rent_payment": None,
        "last_jail_fine": None,
    }
    if game.last_drawn_card is not None:
        hints["last_drawn_card"] = {
            "text": game.last_drawn_card.text,
            "deck": game.last_drawn_card.deck.value,
        }
    if game.last_rent_payment is not None:
        rent = game.last_rent_payment
        hints["last_rent_payment"] = {"payer_id": rent.payer_id, "payee_id": rent.payee_id, "amount": rent.amount}
    if game.last_jail_fine is not None:
        fine = game.last_jail_fine
        hints["last_jail_fine"] = {"payer_id": fine.payer_id, "amount": fine.amount}

    snapshot: Dict[str, Any] = {
        "turn_number": game.turn_number,
        "current_player_id": game.current_player.id,
        "phase": game.phase.value,
        "dice": list(game.dice),
        "is_doubles": game.is_doubles,
        "doubles_count": game.doubles_count,
        "players": players,
        "tiles": tiles,
        "pending_trade": pending_trade,
        "pending_bailout": (
            {"player_id": game.pending_bailout.player_id} if game.pending_bailout is not None else None
        ),
        **hints,
        "winner": game.winner,
        "game_over": game.game_over,
        "logs": list(game.logs[-log_limit:]),
        "chat": [
            {"sender": c.sender, "message": c.message, "color": c.color}
            for c in game.chat[-chat_limit:]
        ],
    }
    return snapshot
