"""
Core domain layer.

Exposes the game engine primitives and the decision oracles.
"""

from worldopoly.core.game import GameConfig, GamePhase, GameState, Player, Tile, apply_action, create_game
from worldopoly.core.agents import DecisionOracle, HeuristicOracle, LLMOracle

__all__ = [
    "GameConfig",
    "GamePhase",
    "GameState",
    "Player",
    "Tile",
    "apply_action",
    "create_game",
    "DecisionOracle",
    "HeuristicOracle",
    "LLMOracle",
]
