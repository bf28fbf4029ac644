"""
Trade negotiation.

A proposal asks the target for one of their tiles in exchange for cash and,
optionally, one of the initiator's tiles. Trades from an AI to the human are
queued for an explicit decision; every other pairing is settled at once by
a price-based valuation. A rejected initiator is blacklisted from proposing
to the same target again.
"""

from dataclasses import replace
from typing import Tuple

from worldopoly.core.game.board import group_has_buildings
from worldopoly.core.game.dice import RandomSource
from worldopoly.core.game.events import EventType
from worldopoly.core.game.state import SYSTEM_COLOR, SYSTEM_SENDER, GameState, TradeProposal

COUNTER_PREMIUM = 1.1

REJECTION_LINES = (
    "I can't accept that. How about ${amount}?",
    "Too low! I'd consider ${amount}.",
    "Your offer is insulting. Bring me ${amount} and we'll talk.",
    "No deal. I value this at ${amount}.",
)


def validate_trade(state: GameState, proposal: TradeProposal) -> Tuple[bool, str]:
    """
    Check that a proposal refers to real, tradable things.

    Returns:
        Tuple of (is_valid, error message)
    """
    initiator = state.get_player(proposal.initiator_id)
    target = state.get_player(proposal.target_id)
    if initiator is None or target is None:
        return False, "Unknown player"
    if initiator.id == target.id:
        return False, "Cannot trade with yourself"
    if initiator.is_bankrupt or target.is_bankrupt:
        return False, "Bankrupt players cannot trade"
    if proposal.cash < 0:
        return False, "Cash amount cannot be negative"

    requested = state.get_tile(proposal.requested_tile_id)
    if requested is None or requested.owner_id != target.id:
        return False, f"{target.name} doesn't own the requested tile"

    offered = None
    if proposal.offered_tile_id is not None:
        offered = state.get_tile(proposal.offered_tile_id)
        if offered is None or offered.owner_id != initiator.id:
            return False, f"{initiator.name} doesn't own the offered tile"

    for tile in (requested, offered):
        if tile is not None and group_has_buildings(state.board, tile.group):
            return False, f"{tile.name} cannot be traded while its group has buildings"

    return True, ""


def evaluate_offer(state: GameState, proposal: TradeProposal) -> int:
    """Cash plus the offered tile's price, plus a bonus if it helps the target toward a set."""
    value = proposal.cash
    offered = state.get_tile(proposal.offered_tile_id)
    target = state.get_player(proposal.target_id)
    if offered is not None and target is not None:
        value += offered.price
        if any(state.board[tile_id].group == offered.group for tile_id in target.properties):
            value += state.config.group_bonus
    return value


def required_value(state: GameState, proposal: TradeProposal) -> float:
    """Minimum offer value the target accepts: requested price times the markup."""
    requested = state.get_tile(proposal.requested_tile_id)
    initiator = state.get_player(proposal.initiator_id)
    target = state.get_player(proposal.target_id)
    if requested is None or initiator is None or target is None:
        return 0.0
    both_ai = initiator.is_ai and target.is_ai
    markup = state.config.ai_trade_markup if both_ai else state.config.trade_markup
    return requested.price * markup


def propose_trade(state: GameState, proposal: TradeProposal, rng: RandomSource) -> GameState:
    """Open a trade. Queued for the human if an AI asks them, otherwise settled now."""
    if state.game_over or state.pending_trade is not None:
        return state

    valid, _ = validate_trade(state, proposal)
    if not valid:
        return state

    initiator = state.get_player(proposal.initiator_id)
    target = state.get_player(proposal.target_id)
    requested = state.board[proposal.requested_tile_id]
    offered = state.get_tile(proposal.offered_tile_id)

    if target.id in initiator.trade_blacklist:
        return state.log(
            EventType.TRADE_REFUSED,
            f"{target.name} refuses to hear another offer from {initiator.name}.",
            initiator.id,
            target_id=target.id,
        )

    offer_text = f"${proposal.cash}" + (f" + {offered.name}" if offered is not None else "")
    state = state.log(
        EventType.TRADE_PROPOSED,
        f"{initiator.name} offers {offer_text} to {target.name} for {requested.name}.",
        initiator.id,
        target_id=target.id,
        requested_tile_id=requested.id,
        offered_tile_id=proposal.offered_tile_id,
        cash=proposal.cash,
    )

    if initiator.is_ai and not target.is_ai:
        state = replace(state, pending_trade=proposal)
        return state.log(
            EventType.TRADE_QUEUED,
            f"{target.name} has an incoming trade offer from {initiator.name}.",
            target.id,
            initiator_id=initiator.id,
        )

    required = required_value(state, proposal)
    if evaluate_offer(state, proposal) >= required:
        state = state.log(
            EventType.TRADE_ACCEPTED,
            f"{target.name} accepted {initiator.name}'s offer.",
            target.id,
            initiator_id=initiator.id,
        )
        return execute_trade(state, proposal)

    return _reject(state, proposal, required, rng)


def _reject(state: GameState, proposal: TradeProposal, required: float, rng: RandomSource) -> GameState:
    initiator = state.get_player(proposal.initiator_id)
    target = state.get_player(proposal.target_id)
    requested = state.board[proposal.requested_tile_id]

    state = _blacklist(state, proposal)
    state = state.log(
        EventType.TRADE_REJECTED,
        f"{target.name} rejected {initiator.name}'s offer for {requested.name}.",
        target.id,
        initiator_id=initiator.id,
    )
    counter_offer = int(round(required * COUNTER_PREMIUM, 2))
    return state.say_as(target, rng.choice(REJECTION_LINES).format(amount=counter_offer))


def _blacklist(state: GameState, proposal: TradeProposal) -> GameState:
    initiator = state.get_player(proposal.initiator_id)
    if initiator is None:
        return state
    return state.with_player(
        replace(initiator, trade_blacklist=initiator.trade_blacklist | {proposal.target_id})
    )


def execute_trade(state: GameState, proposal: TradeProposal) -> GameState:
    """
    Swap cash and tiles between initiator and target in a single update.

    An initiator who cannot cover the cash gets a chat notice and nothing
    else changes.
    """
    valid, error = validate_trade(state, proposal)
    if not valid:
        return state.say(SYSTEM_SENDER, f"Trade failed: {error}.", SYSTEM_COLOR)

    initiator = state.get_player(proposal.initiator_id)
    target = state.get_player(proposal.target_id)
    if initiator.money < proposal.cash:
        return state.say(SYSTEM_SENDER, "Trade failed: Insufficient funds.", SYSTEM_COLOR)

    requested = state.board[proposal.requested_tile_id]
    offered = state.get_tile(proposal.offered_tile_id)
    given = frozenset({offered.id}) if offered is not None else frozenset()

    new_initiator = replace(
        initiator,
        money=initiator.money - proposal.cash,
        properties=(initiator.properties | {requested.id}) - given,
    )
    new_target = replace(
        target,
        money=target.money + proposal.cash,
        properties=(target.properties - {requested.id}) | given,
    )
    state = state.with_player(new_initiator).with_player(new_target)
    state = state.with_tile(replace(requested, owner_id=initiator.id))
    if offered is not None:
        state = state.with_tile(replace(offered, owner_id=target.id))

    state = state.log(
        EventType.TRADE_EXECUTED,
        f"{initiator.name} traded with {target.name} for {requested.name}.",
        initiator.id,
        target_id=target.id,
        requested_tile_id=requested.id,
        offered_tile_id=proposal.offered_tile_id,
        cash=proposal.cash,
    )
    if offered is not None:
        message = f"Deal accepted! Swapped {requested.name} for {offered.name} + ${proposal.cash}."
    else:
        message = f"Deal accepted! I sold {requested.name} for ${proposal.cash}."
    return state.say_as(new_target, message)


def resolve_trade(state: GameState, accept: bool, is_counter: bool = False) -> GameState:
    """
    Settle the queued trade.

    Accept executes it. A plain reject blacklists initiator -> target. A
    counter clears it without penalty and lifts an existing blacklist entry
    so the human can answer with a fresh proposal.
    """
    proposal = state.pending_trade
    if proposal is None:
        return state

    state = replace(state, pending_trade=None)
    initiator = state.get_player(proposal.initiator_id)
    target = state.get_player(proposal.target_id)
    if initiator is None or target is None:
        return state

    if accept:
        state = state.log(
            EventType.TRADE_ACCEPTED,
            f"{target.name} accepted {initiator.name}'s offer.",
            target.id,
            initiator_id=initiator.id,
        )
        return execute_trade(state, proposal)

    if is_counter:
        state = state.with_player(
            replace(initiator, trade_blacklist=initiator.trade_blacklist - {target.id})
        )
        return state.log(
            EventType.TRADE_COUNTERED,
            f"{target.name} is preparing a counter-offer for {initiator.name}.",
            target.id,
            initiator_id=initiator.id,
        )

    state = _blacklist(state, proposal)
    return state.log(
        EventType.TRADE_REJECTED,
        f"{target.name} rejected {initiator.name}'s offer.",
        target.id,
        initiator_id=initiator.id,
    )
