"""
End-of-turn solvency checks, bailouts and bankruptcy.
"""

from dataclasses import replace

from worldopoly.core.game.engine import rotate_turn
from worldopoly.core.game.events import EventType
from worldopoly.core.game.state import GamePhase, GameState, PendingBailout


def declare_bankruptcy(state: GameState, player_id: int) -> GameState:
    """
    Take a player out of the game.

    Every tile they hold goes back to the bank with its buildings removed.
    Pending decisions that involve them are dropped, and if at most one
    solvent player remains the game ends.
    """
    player = state.get_player(player_id)
    if player is None or player.is_bankrupt:
        return state

    for tile_id in player.properties:
        tile = state.board[tile_id]
        state = state.with_tile(replace(tile, owner_id=None, houses=0))

    state = state.with_player(
        replace(
            player,
            money=0,
            position=0,
            is_jailed=False,
            jail_turns=0,
            properties=frozenset(),
            is_bankrupt=True,
        )
    )

    trade = state.pending_trade
    if trade is not None and player_id in (trade.initiator_id, trade.target_id):
        state = replace(state, pending_trade=None)
    if state.pending_bailout is not None and state.pending_bailout.player_id == player_id:
        state = replace(state, pending_bailout=None)

    state = state.log(
        EventType.BANKRUPTCY,
        f"{player.name} is BANKRUPT! All properties returned to bank.",
        player.id,
        released=sorted(player.properties),
    )
    return _check_winner(state)


def _check_winner(state: GameState) -> GameState:
    if state.game_over:
        return state

    remaining = state.active_players()
    if len(remaining) != 1:
        return state

    winner = remaining[0]
    state = replace(state, winner=winner.id)
    return state.log(
        EventType.GAME_END,
        f"Game over! {winner.name} wins!",
        winner.id,
        winner_id=winner.id,
        final_money=winner.money,
    )


def request_bailout(state: GameState, player_id: int) -> GameState:
    """Queue a bailout offer. Players who have used every bailout go bankrupt instead."""
    if state.game_over or state.pending_bailout is not None:
        return state

    player = state.get_player(player_id)
    if player is None or player.is_bankrupt:
        return state

    if player.bailout_count >= state.config.max_bailouts:
        return declare_bankruptcy(state, player_id)

    state = replace(state, pending_bailout=PendingBailout(player_id))
    return state.log(
        EventType.BAILOUT_REQUESTED,
        f"{player.name} is below ${state.config.bankruptcy_floor} and asks for a bailout.",
        player.id,
        money=player.money,
        bailout_count=player.bailout_count,
    )


def resolve_bailout(state: GameState, accept: bool) -> GameState:
    """Grant the pending bailout or turn it down, which bankrupts the player."""
    pending = state.pending_bailout
    if pending is None:
        return state

    state = replace(state, pending_bailout=None)
    player = state.get_player(pending.player_id)
    if player is None:
        return state

    if not accept:
        state = state.log(EventType.BAILOUT_REJECTED, f"{player.name}'s bailout was rejected.", player.id)
        return declare_bankruptcy(state, player.id)

    amount = state.config.bailout_amount
    rescued = replace(
        player,
        money=player.money + amount,
        bailout_count=min(player.bailout_count + 1, state.config.max_bailouts),
    )
    state = state.with_player(rescued)
    return state.log(
        EventType.BAILOUT_ACCEPTED,
        f"{player.name} received a ${amount} bailout ({rescued.bailout_count}/{state.config.max_bailouts}).",
        player.id,
        amount=amount,
        bailout_count=rescued.bailout_count,
    )


def advance_turn(state: GameState) -> GameState:
    """
    Close the current turn and hand over to the next player.

    A player below the floor is either offered a bailout (AI with bailouts
    left; the turn stays put until it is resolved) or declared bankrupt.
    """
    if state.game_over or state.pending_bailout is not None or state.phase != GamePhase.END_TURN:
        return state

    config = state.config
    player = state.current_player
    if not player.is_bankrupt and player.money < config.bankruptcy_floor:
        if player.is_ai and player.bailout_count < config.max_bailouts:
            return request_bailout(state, player.id)
        state = declare_bankruptcy(state, player.id)
        if state.game_over:
            return state

    return rotate_turn(state)
