"""
Turn engine: dice, movement, landing resolution, rent, jail, buying and building.

Every function takes a GameState and returns a new one. An action that is
illegal in the current phase returns the state it was given, unchanged.
"""

from dataclasses import replace
from typing import Optional, Sequence

from worldopoly.core.game import dice
from worldopoly.core.game.board import (
    BOARD_SIZE,
    count_owned,
    create_board,
    find_nearest,
    owns_group,
    steps_to,
)
from worldopoly.core.game.cards import CardEffect, draw_card
from worldopoly.core.game.config import GameConfig
from worldopoly.core.game.dice import RandomSource
from worldopoly.core.game.events import EventType
from worldopoly.core.game.player import create_player
from worldopoly.core.game.state import (
    DrawnCard,
    GamePhase,
    GameState,
    JailFine,
    RentPayment,
)
from worldopoly.core.game.tiles import HOTEL, PURCHASABLE_TYPES, Tile, TileType

RAILROAD_BASE_RENT = 25
UTILITY_DICE_MULTIPLIER = 4
BIG_RENT = 50

PASS_GO_LINES = ("Nice, payday!", "Money money money!", "I needed that.", "Cash flow positive.")
RENT_PAID_LINES = (
    "Ouch! ${rent}?",
    "There goes my savings to {owner}.",
    "Rent is too high!",
    "Just take my money.",
)
RENT_COLLECTED_LINES = (
    "Thanks for the rent!",
    "Business is booming.",
    "Investments paying off.",
    "Enjoy your stay!",
)


def create_game(player_names: Sequence[str], config: Optional[GameConfig] = None) -> GameState:
    """
    Create a new game from a roster of names.

    The first name is the human player; every other seat is AI-controlled.
    """
    if len(player_names) < 2:
        raise ValueError(f"A game needs at least two players, got {len(player_names)}")
    config = config or GameConfig()

    players = tuple(
        create_player(index, name, config.starting_cash) for index, name in enumerate(player_names)
    )
    state = GameState(players=players, board=create_board(), config=config)
    return state.log(
        EventType.GAME_START,
        "Game started!",
        players=list(player_names),
        starting_cash=config.starting_cash,
        seed=config.seed,
    )


def _settle_phase(state: GameState) -> GameState:
    """Phase after a landing resolves: doubles earn another roll, anything else ends the turn."""
    return replace(state, phase=GamePhase.ROLL if state.is_doubles else GamePhase.END_TURN)


def roll_dice(state: GameState, rng: RandomSource) -> GameState:
    """Roll for the current player and resolve everything the roll triggers."""
    if state.game_over or state.phase != GamePhase.ROLL or state.pending_bailout is not None:
        return state

    die1, die2 = dice.roll_dice(rng)
    is_doubles = die1 == die2
    doubles_count = state.doubles_count + 1 if is_doubles else 0
    total = die1 + die2

    state = replace(
        state.clear_hints(),
        dice=(die1, die2),
        is_doubles=is_doubles,
        doubles_count=doubles_count,
    )
    player = state.current_player
    state = state.log(
        EventType.DICE_ROLL,
        f"{player.name} rolled {die1} + {die2} = {total}.",
        player.id,
        die1=die1,
        die2=die2,
        total=total,
        doubles=is_doubles,
    )

    if player.is_jailed:
        return _roll_in_jail(state, total, rng)

    if doubles_count >= state.config.max_doubles:
        state = state.log(
            EventType.GO_TO_JAIL,
            f"{player.name} rolled doubles {doubles_count} times and goes to Jail!",
            player.id,
            reason="doubles",
        )
        return send_to_jail(state, player.id)

    return move_player(state, total, rng)


def _roll_in_jail(state: GameState, total: int, rng: RandomSource) -> GameState:
    config = state.config
    player = state.current_player

    if state.is_doubles:
        state = state.with_player(replace(player, is_jailed=False, jail_turns=0))
        state = state.log(
            EventType.JAIL_RELEASE,
            f"{player.name} rolled doubles and escaped Jail!",
            player.id,
            method="doubles",
        )
        return move_player(state, total, rng)

    jail_turns = player.jail_turns + 1
    if jail_turns >= config.max_jail_turns:
        # Forced release: the fine is taken even if it leaves the player negative
        released = replace(
            player,
            money=player.money - config.jail_fine,
            is_jailed=False,
            jail_turns=0,
        )
        state = replace(state.with_player(released), last_jail_fine=JailFine(player.id, config.jail_fine))
        state = state.log(
            EventType.JAIL_RELEASE,
            f"{player.name} paid ${config.jail_fine} to escape Jail.",
            player.id,
            method="forced_fine",
            amount=config.jail_fine,
        )
        return move_player(state, total, rng)

    state = state.with_player(replace(player, jail_turns=jail_turns))
    state = state.log(
        EventType.JAIL_ATTEMPT,
        f"{player.name} stays in Jail ({jail_turns}/{config.max_jail_turns}).",
        player.id,
        attempt=jail_turns,
    )
    return replace(state, phase=GamePhase.END_TURN)


def move_player(state: GameState, steps: int, rng: RandomSource) -> GameState:
    """
    Move the current player and resolve the landing.

    Steps may be negative (backward card moves). Only a forward wrap past
    tile 39, including landing exactly on GO, pays the GO salary.
    """
    player = state.current_player
    raw_position = player.position + steps
    passed_go = raw_position >= BOARD_SIZE
    new_position = raw_position % BOARD_SIZE

    money = player.money + (state.config.go_salary if passed_go else 0)
    moved = replace(player, position=new_position, money=money)
    state = state.with_player(moved)

    if passed_go:
        state = state.log(
            EventType.PASS_GO,
            f"{player.name} passed GO and collected ${state.config.go_salary}.",
            player.id,
            amount=state.config.go_salary,
        )
        if player.is_ai:
            state = state.say_as(moved, rng.choice(PASS_GO_LINES))

    return handle_tile_landing(state, rng)


def handle_tile_landing(state: GameState, rng: RandomSource) -> GameState:
    """Dispatch on the type of the tile the current player now occupies."""
    player = state.current_player
    tile = state.board[player.position]
    state = state.log(EventType.LAND, f"{player.name} landed on {tile.name}.", player.id, tile_id=tile.id)

    if tile.type == TileType.GO_TO_JAIL:
        return send_to_jail(state, player.id)

    if tile.type == TileType.TAX:
        state = state.with_player(player.debit(tile.price))
        state = state.log(EventType.TAX_PAYMENT, f"{player.name} paid ${tile.price} tax.", player.id, amount=tile.price)
        return _settle_phase(state)

    if tile.type in (TileType.CHANCE, TileType.COMMUNITY_CHEST):
        return _resolve_card(state, tile, rng)

    if tile.type in PURCHASABLE_TYPES:
        if not tile.is_owned():
            return replace(state, phase=GamePhase.ACTION)
        if tile.owner_id != player.id:
            state = pay_rent(state, player.id, tile.id, rng)
        return _settle_phase(state)

    return _settle_phase(state)


def _resolve_card(state: GameState, tile: Tile, rng: RandomSource) -> GameState:
    card = draw_card(tile.type, rng)
    player = state.current_player

    state = replace(state, last_drawn_card=DrawnCard(card.text, tile.type))
    state = state.log(
        EventType.CARD_DRAW,
        f"{player.name} drew: {card.text}",
        player.id,
        deck=tile.type.value,
        effect=card.effect.value,
        amount=card.amount,
    )
    if player.is_ai:
        state = state.say_as(player, f"I drew: {card.text}")

    if card.effect == CardEffect.MONEY:
        return _settle_phase(state.with_player(player.credit(card.amount)))

    if card.effect == CardEffect.GO_TO_JAIL:
        return send_to_jail(state, player.id)

    if card.effect == CardEffect.GET_OUT_OF_JAIL:
        # No card inventory is kept
        state = state.log(EventType.CARD_EFFECT, f"{player.name} keeps the card (Simulated).", player.id)
        return _settle_phase(state)

    if card.effect == CardEffect.REPAIRS:
        houses = sum(state.board[tile_id].houses for tile_id in player.properties)
        cost = houses * card.amount
        state = state.with_player(player.debit(cost))
        state = state.log(
            EventType.CARD_EFFECT,
            f"{player.name} paid ${cost} for repairs.",
            player.id,
            amount=cost,
            houses=houses,
        )
        return _settle_phase(state)

    if card.effect == CardEffect.MOVE:
        if card.amount < 0:
            return move_player(state, card.amount, rng)
        return move_player(state, steps_to(player.position, card.amount), rng)

    if card.effect == CardEffect.MOVE_NEAREST and card.target is not None:
        nearest = find_nearest(state.board, player.position, card.target)
        if nearest is not None:
            return move_player(state, steps_to(player.position, nearest), rng)

    return _settle_phase(state)


def send_to_jail(state: GameState, player_id: int) -> GameState:
    """Jail the player, end the turn and forfeit any doubles bonus."""
    player = state.get_player(player_id)
    if player is None:
        return state

    jailed = replace(player, position=state.config.jail_position, is_jailed=True, jail_turns=0)
    state = state.with_player(jailed)
    state = state.log(EventType.GO_TO_JAIL, f"{player.name} goes to Jail!", player.id)
    if player.is_ai:
        state = state.say_as(jailed, "I've been framed!")
    return replace(state, phase=GamePhase.END_TURN, doubles_count=0)


def calculate_rent(state: GameState, tile: Tile) -> int:
    """
    Rent owed for landing on an owned tile.

    Properties use the rent table indexed by house count, railroads double
    per railroad the owner holds, utilities charge 4x the last dice total.
    """
    if tile.owner_id is None:
        return 0

    if tile.type == TileType.PROPERTY:
        return tile.rent_for(tile.houses)

    if tile.type == TileType.RAILROAD:
        railroads_owned = count_owned(state.board, tile.owner_id, TileType.RAILROAD)
        if railroads_owned == 0:
            return 0
        return RAILROAD_BASE_RENT * (2 ** (railroads_owned - 1))

    if tile.type == TileType.UTILITY:
        return UTILITY_DICE_MULTIPLIER * sum(state.dice)

    return 0


def pay_rent(state: GameState, payer_id: int, tile_id: int, rng: RandomSource) -> GameState:
    """Transfer rent from payer to the tile's owner in one update. No balance check."""
    tile = state.board[tile_id]
    payer = state.get_player(payer_id)
    owner = state.get_player(tile.owner_id)
    if payer is None or owner is None or payer.id == owner.id:
        return state

    rent = calculate_rent(state, tile)
    state = state.with_player(payer.debit(rent)).with_player(owner.credit(rent))
    state = replace(state, last_rent_payment=RentPayment(payer.id, owner.id, rent))
    state = state.log(
        EventType.RENT_PAYMENT,
        f"{payer.name} pays ${rent} rent to {owner.name}.",
        payer.id,
        payee_id=owner.id,
        tile_id=tile.id,
        amount=rent,
    )

    if payer.is_ai and rent > BIG_RENT:
        line = rng.choice(RENT_PAID_LINES).format(rent=rent, owner=owner.name)
        state = state.say_as(payer, line)
    if owner.is_ai and rent > BIG_RENT:
        state = state.say_as(owner, rng.choice(RENT_COLLECTED_LINES))
    return state


def buy_property(state: GameState) -> GameState:
    """Buy the tile the current player occupies. Legal only in the ACTION phase."""
    if state.game_over or state.phase != GamePhase.ACTION:
        return state

    player = state.current_player
    tile = state.current_tile
    if tile.is_owned() or not tile.is_purchasable:
        return state

    if player.money < tile.price:
        state = state.log(
            EventType.PURCHASE_FAILED,
            f"{player.name} cannot afford {tile.name}.",
            player.id,
            tile_id=tile.id,
            price=tile.price,
        )
        return _settle_phase(state)

    buyer = player.debit(tile.price).with_property(tile.id)
    state = state.with_player(buyer).with_tile(replace(tile, owner_id=player.id))
    state = state.log(
        EventType.PURCHASE,
        f"{player.name} bought {tile.name} for ${tile.price}.",
        player.id,
        tile_id=tile.id,
        price=tile.price,
        new_balance=buyer.money,
    )
    return _settle_phase(state)


def pass_property(state: GameState) -> GameState:
    """Decline to buy the occupied tile."""
    if state.game_over or state.phase != GamePhase.ACTION:
        return state

    player = state.current_player
    state = state.log(
        EventType.PURCHASE_DECLINED,
        f"{player.name} decided not to buy.",
        player.id,
        tile_id=player.position,
    )
    return _settle_phase(state)


def build_house(state: GameState, tile_id: int) -> GameState:
    """
    Add one house (the fifth is the hotel) to a tile of the current player.

    Allowed in every phase but ROLL, on any owned tile whose whole group the
    player holds. No even-building rule is applied.
    """
    if state.game_over or state.phase == GamePhase.ROLL:
        return state

    player = state.current_player
    tile = state.get_tile(tile_id)
    if tile is None or tile.owner_id != player.id or not tile.is_buildable:
        return state

    if not owns_group(state.board, player.id, tile.group):
        return state.log(
            EventType.BUILD_FAILED,
            f"{player.name} needs the full color set to build.",
            player.id,
            tile_id=tile.id,
        )

    if tile.houses >= HOTEL:
        return state

    if player.money < tile.house_cost:
        return state.log(
            EventType.BUILD_FAILED,
            f"{player.name} cannot afford to build on {tile.name}.",
            player.id,
            tile_id=tile.id,
            cost=tile.house_cost,
        )

    houses = tile.houses + 1
    state = state.with_player(player.debit(tile.house_cost)).with_tile(replace(tile, houses=houses))
    is_hotel = houses == HOTEL
    return state.log(
        EventType.BUILD_HOTEL if is_hotel else EventType.BUILD_HOUSE,
        f"{player.name} built a {'Hotel' if is_hotel else 'House'} on {tile.name}.",
        player.id,
        tile_id=tile.id,
        houses=houses,
        cost=tile.house_cost,
    )


def pay_jail_fine(state: GameState) -> GameState:
    """Pay the fine before rolling. A no-op unless jailed, in ROLL phase and solvent."""
    if state.game_over or state.phase != GamePhase.ROLL:
        return state

    player = state.current_player
    if not player.is_jailed:
        return state

    fine = state.config.jail_fine
    if player.money < fine:
        return state.log(
            EventType.JAIL_FINE_FAILED,
            f"{player.name} cannot afford the ${fine} jail fine.",
            player.id,
        )

    released = replace(player, money=player.money - fine, is_jailed=False, jail_turns=0)
    state = replace(
        state.with_player(released),
        last_jail_fine=JailFine(player.id, fine),
        last_drawn_card=None,
        last_rent_payment=None,
    )
    return state.log(
        EventType.JAIL_RELEASE,
        f"{player.name} paid ${fine} fine to get out of Jail.",
        player.id,
        method="fine",
        amount=fine,
    )


def rotate_turn(state: GameState) -> GameState:
    """Hand the turn to the next solvent player and reset per-turn fields."""
    count = len(state.players)
    next_index = state.current_player_index
    for offset in range(1, count + 1):
        candidate = (state.current_player_index + offset) % count
        if not state.players[candidate].is_bankrupt:
            next_index = candidate
            break

    state = replace(
        state.clear_hints(),
        current_player_index=next_index,
        turn_number=state.turn_number + 1,
        is_doubles=False,
        doubles_count=0,
        phase=GamePhase.ROLL,
    )
    player = state.current_player
    return state.log(EventType.TURN_START, f"It's {player.name}'s turn.", player.id, turn=state.turn_number)


def dismiss_card_popup(state: GameState) -> GameState:
    if state.last_drawn_card is None:
        return state
    return replace(state, last_drawn_card=None)


def post_chat_message(state: GameState, sender: str, text: str, color: str) -> GameState:
    return state.say(sender, text, color)
