from worldopoly.core.game.config import GameConfig
from worldopoly.core.game.engine import create_game
from worldopoly.core.game.player import Player
from worldopoly.core.game.rules import Action, ActionType, apply_action, get_legal_actions, parse_action
from worldopoly.core.game.state import GamePhase, GameState, TradeProposal
from worldopoly.core.game.tiles import Tile, TileType

__all__ = [
    "Action",
    "ActionType",
    "GameConfig",
    "GamePhase",
    "GameState",
    "Player",
    "Tile",
    "TileType",
    "TradeProposal",
    "apply_action",
    "create_game",
    "get_legal_actions",
    "parse_action",
]
