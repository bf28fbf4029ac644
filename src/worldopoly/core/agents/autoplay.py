"""
Turn planner for AI seats.

Given a state whose current player is an AI, ``AutoPlayer.plan`` returns the
actions that seat takes next: roll, buy or pass (asking the oracle), build
on a completed set, try one trade per turn, or end the turn. Planning is
synchronous and side-effect free on the game state, so the runner can run
it in a worker thread under a timeout.
"""

import logging
import random
from typing import Dict, List, Optional

from worldopoly.core.agents.base import DecisionOracle, build_buy_request, build_trade_request
from worldopoly.core.agents.personas import DEFAULT_MODEL_ID
from worldopoly.core.game.board import get_group, group_has_buildings, owns_group
from worldopoly.core.game.dice import RandomSource
from worldopoly.core.game.rules import (
    Action,
    AdvanceTurn,
    BuildHouse,
    BuyProperty,
    PassProperty,
    PostChatMessage,
    ProposeTrade,
    ResolveBailout,
    ResolveTrade,
    RollDice,
)
from worldopoly.core.game.state import GamePhase, GameState
from worldopoly.core.game.trading import evaluate_offer, required_value
from worldopoly.core.game.tiles import HOTEL

logger = logging.getLogger(__name__)

BUILD_RESERVE = 200

BUY_LINES = (
    "Acquiring {tile} to diversify my portfolio.",
    "Buying {tile}. It's a strategic asset.",
    "Small investment in {tile}.",
    "I'll take {tile}, thanks.",
)

GREETING_LINES = (
    "Hello {human}! Ready to lose?",
    "Greetings. I am running entirely on local compute.",
    "Hi there! Nice moves so far.",
    "Beep boop. Just kidding, hi!",
)
GENERIC_LINES = (
    "Interesting point.",
    "Focus on the game!",
    "Are you going to roll or just chat?",
    "I'm calculating my next move.",
    "Did you see the stock market today? Just kidding.",
)


class AutoPlayer:
    """
    Plans moves for AI seats.

    Attributes:
        oracle: Answers buy and trade questions.
        models: Model id per AI player id; missing ids use the default persona.
        rng: Source for chat flavor.
    """

    def __init__(
        self,
        oracle: DecisionOracle,
        models: Optional[Dict[int, str]] = None,
        rng: Optional[RandomSource] = None,
        play_human: bool = False,
    ):
        self.oracle = oracle
        self.models = dict(models or {})
        self.rng = rng or random.Random()
        self.play_human = play_human
        # player id -> turn number of their last trade attempt
        self._trade_attempts: Dict[int, int] = {}

    def model_for(self, player_id: int) -> str:
        return self.models.get(player_id, DEFAULT_MODEL_ID)

    def plan(self, state: GameState) -> List[Action]:
        """
        Next actions for the current player, or nothing if it is not an AI's move.

        With ``play_human`` set the human seat is played as well, including
        its answers to queued trades and bailouts.
        """
        if state.game_over:
            return []

        if self.play_human:
            pending = self._plan_pending(state)
            if pending:
                return pending

        player = state.current_player
        if (
            (not player.is_ai and not self.play_human)
            or player.is_bankrupt
            or state.pending_trade is not None
            or state.pending_bailout is not None
        ):
            return []

        if state.phase == GamePhase.ROLL:
            return [RollDice()]

        if state.phase == GamePhase.ACTION:
            return self._plan_purchase(state)

        build = self._plan_build(state)
        if build:
            return build

        trade = self._plan_trade(state)
        if trade:
            return trade

        return [AdvanceTurn()]

    def _plan_pending(self, state: GameState) -> List[Action]:
        if state.pending_bailout is not None:
            return [ResolveBailout(accept=True)]
        proposal = state.pending_trade
        if proposal is not None:
            accept = evaluate_offer(state, proposal) >= required_value(state, proposal)
            return [ResolveTrade(accept=accept)]
        return []

    def _plan_purchase(self, state: GameState) -> List[Action]:
        player = state.current_player
        tile = state.current_tile
        if not tile.is_purchasable or tile.is_owned():
            return [PassProperty()]

        request = build_buy_request(state, player.id, self.model_for(player.id))
        decision = self.oracle.decide_buy(request)
        logger.debug("%s on %s: %s (%s)", player.name, tile.name, decision.decision, decision.reasoning)

        if decision.decision == "BUY" and player.money >= tile.price:
            line = self.rng.choice(BUY_LINES).format(tile=tile.name)
            return [BuyProperty(), PostChatMessage(sender=player.name, text=line, color=player.color)]

        line = f"Passing on {tile.name} for now. Too pricey."
        return [PassProperty(), PostChatMessage(sender=player.name, text=line, color=player.color)]

    def _plan_build(self, state: GameState) -> List[Action]:
        """One house per step on the first monopoly tile that leaves a cash reserve."""
        player = state.current_player
        groups = sorted({state.board[tile_id].group for tile_id in player.properties if state.board[tile_id].group})
        for group in groups:
            if not owns_group(state.board, player.id, group):
                continue
            for tile in get_group(state.board, group):
                if (
                    tile.is_buildable
                    and tile.houses < HOTEL
                    and player.money > tile.house_cost + BUILD_RESERVE
                ):
                    line = f"Developing {tile.name} with new infrastructure."
                    return [
                        BuildHouse(tile_id=tile.id),
                        PostChatMessage(sender=player.name, text=line, color=player.color),
                    ]
        return []

    def _plan_trade(self, state: GameState) -> List[Action]:
        """
        Ask the oracle about one tile that would extend a set the player has
        started. At most one attempt per player per turn.
        """
        player = state.current_player
        if self._trade_attempts.get(player.id) == state.turn_number:
            return []
        self._trade_attempts[player.id] = state.turn_number

        target_tile = self._find_trade_target(state)
        if target_tile is None:
            return []

        request = build_trade_request(state, player.id, target_tile.id, self.model_for(player.id))
        decision = self.oracle.decide_trade(request)
        if not decision.should_trade or decision.offer_amount <= 0:
            return []

        offer = min(decision.offer_amount, player.money)
        return [
            ProposeTrade(
                initiator_id=player.id,
                target_id=target_tile.owner_id,
                requested_tile_id=target_tile.id,
                cash_amount=offer,
            )
        ]

    def _find_trade_target(self, state: GameState):
        player = state.current_player
        started = {state.board[tile_id].group for tile_id in player.properties}
        for tile in state.board:
            if (
                tile.group in started
                and tile.owner_id is not None
                and tile.owner_id != player.id
                and tile.owner_id not in player.trade_blacklist
                and not group_has_buildings(state.board, tile.group)
            ):
                owner = state.get_player(tile.owner_id)
                if owner is not None and not owner.is_bankrupt:
                    return tile
        return None

    def reply_to_chat(self, state: GameState, message: str) -> Optional[PostChatMessage]:
        """A random AI seat answers a human chat line."""
        ai_players = [p for p in state.active_players() if p.is_ai]
        if not ai_players:
            return None

        speaker = self.rng.choice(ai_players)
        text = message.lower()
        if any(word in text for word in ("hi", "hello", "hey")):
            human = state.players[0].name
            response = self.rng.choice(GREETING_LINES).format(human=human)
        elif "trade" in text:
            response = "I'm always open to fair deals, but I'm expensive."
        elif "strategy" in text or "idea" in text:
            response = "My strategy is simple: Buy everything and bankrupt you."
        elif "money" in text or "rich" in text:
            response = "Cash is king."
        else:
            response = self.rng.choice(GENERIC_LINES)
        return PostChatMessage(sender=speaker.name, text=response, color=speaker.color)
