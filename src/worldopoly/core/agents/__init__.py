"""
Decision oracles and the AI turn planner.
"""

from worldopoly.core.agents.autoplay import AutoPlayer
from worldopoly.core.agents.base import (
    BuyDecision,
    ChatReply,
    DecisionKind,
    DecisionOracle,
    DecisionRequest,
    TradeDecision,
)
from worldopoly.core.agents.heuristic import HeuristicOracle
from worldopoly.core.agents.llm import LLMOracle

__all__ = [
    "AutoPlayer",
    "BuyDecision",
    "ChatReply",
    "DecisionKind",
    "DecisionOracle",
    "DecisionRequest",
    "HeuristicOracle",
    "LLMOracle",
    "TradeDecision",
]
