"""
Tests for the action reducer, legal action enumeration and action parsing.
"""

from dataclasses import dataclass, replace
from typing import ClassVar

import pytest

from worldopoly.core.exceptions import InvalidActionError
from worldopoly.core.game import ActionType, GamePhase, TradeProposal, apply_action, get_legal_actions, parse_action
from worldopoly.core.game.rules import (
    Action,
    AdvanceTurn,
    BuildHouse,
    BuyProperty,
    DeclareBankruptcy,
    DismissCardPopup,
    PassProperty,
    PayJailFine,
    PostChatMessage,
    ProposeTrade,
    ResolveBailout,
    ResolveTrade,
    RollDice,
)
from worldopoly.core.game.state import DrawnCard, PendingBailout
from worldopoly.core.game.tiles import TileType


def test_only_current_player_may_roll(basic_game):
    assert get_legal_actions(basic_game, 0) == [RollDice()]
    assert get_legal_actions(basic_game, 1) == []
    assert get_legal_actions(basic_game, 7) == []


def test_jailed_player_may_pay_fine(basic_game, update_player):
    state = update_player(basic_game, 0, is_jailed=True, position=10)
    assert get_legal_actions(state, 0) == [RollDice(), PayJailFine()]

    broke = update_player(state, 0, money=49)
    assert get_legal_actions(broke, 0) == [RollDice(), PayJailFine()]


def test_action_phase_offers_buy_and_pass(basic_game, scripted, update_player):
    state = apply_action(basic_game, RollDice(), scripted(3, 4))
    assert get_legal_actions(state, 0) == [BuyProperty(), PassProperty()]

    poor = update_player(state, 0, money=99)
    assert get_legal_actions(poor, 0) == [BuyProperty(), PassProperty()]


def test_end_turn_offers_advance_and_builds(basic_game, own):
    state = replace(own(basic_game, 0, 6, 7, 9), phase=GamePhase.END_TURN)
    state = own(state, 0, 9, houses=5)

    assert get_legal_actions(state, 0) == [AdvanceTurn(), BuildHouse(tile_id=6), BuildHouse(tile_id=7)]


def test_pending_trade_belongs_to_target(basic_game, own):
    state = own(basic_game, 0, 19)
    state = replace(state, pending_trade=TradeProposal(1, 0, 19, cash=100))

    assert get_legal_actions(state, 0) == [
        ResolveTrade(accept=True),
        ResolveTrade(accept=False),
        ResolveTrade(accept=False, is_counter=True),
    ]
    assert get_legal_actions(state, 1) == []


def test_pending_bailout_belongs_to_human(four_player_game):
    state = replace(four_player_game, current_player_index=2, pending_bailout=PendingBailout(2))

    assert get_legal_actions(state, 0) == [ResolveBailout(accept=True), ResolveBailout(accept=False)]
    assert get_legal_actions(state, 2) == []


def test_bankrupt_human_still_answers_bailout(four_player_game, update_player):
    state = update_player(four_player_game, 0, is_bankrupt=True, money=0)
    state = replace(state, current_player_index=2, pending_bailout=PendingBailout(2))

    assert get_legal_actions(state, 0) == [ResolveBailout(accept=True), ResolveBailout(accept=False)]
    assert get_legal_actions(state, 1) == []


def test_bankrupt_player_has_no_actions(basic_game, update_player):
    state = update_player(basic_game, 0, is_bankrupt=True)
    assert get_legal_actions(state, 0) == []


def test_apply_action_routes_to_engine(basic_game, scripted):
    state = apply_action(basic_game, RollDice(), scripted(3, 4))
    state = apply_action(state, BuyProperty(), scripted())
    state = apply_action(state, AdvanceTurn(), scripted())

    assert state.board[7].owner_id == 0
    assert state.current_player_index == 1


def test_apply_propose_trade(basic_game, scripted, own):
    state = own(basic_game, 1, 7)
    action = ProposeTrade(initiator_id=0, target_id=1, requested_tile_id=7, cash_amount=150)

    state = apply_action(state, action, scripted())

    assert state.board[7].owner_id == 0


def test_chat_and_popup_actions(basic_game, scripted):
    state = apply_action(basic_game, PostChatMessage(sender="Alice", text="gl hf"), scripted())
    assert state.chat[-1].message == "gl hf"
    assert state.chat[-1].color == "#FFFFFF"

    state = replace(state, last_drawn_card=DrawnCard("Go to Jail", TileType.CHANCE))
    state = apply_action(state, DismissCardPopup(), scripted())
    assert state.last_drawn_card is None


def test_declaring_current_player_bankrupt_moves_turn_on(four_player_game, scripted):
    state = apply_action(four_player_game, DeclareBankruptcy(player_id=0), scripted())

    assert state.players[0].is_bankrupt
    assert state.current_player_index == 1
    assert state.phase == GamePhase.ROLL


def test_game_over_ignores_actions(basic_game, scripted):
    state = apply_action(basic_game, DeclareBankruptcy(player_id=1), scripted())
    assert state.game_over

    assert apply_action(state, RollDice(), scripted(1, 2)) is state
    assert get_legal_actions(state, 0) == []


def test_unknown_action_class_raises(basic_game, scripted):
    @dataclass(frozen=True, repr=False)
    class Teleport(Action):
        action_type: ClassVar[ActionType] = ActionType.ROLL_DICE

    with pytest.raises(InvalidActionError):
        apply_action(basic_game, Teleport(), scripted())


def test_parse_action():
    assert parse_action("roll_dice") == RollDice()
    assert parse_action("build_house", {"tile_id": 7}) == BuildHouse(tile_id=7)
    assert parse_action("resolve_trade", {"accept": False, "is_counter": True}) == ResolveTrade(
        accept=False, is_counter=True
    )
    assert parse_action(
        "propose_trade",
        {"initiator_id": 0, "target_id": 1, "requested_tile_id": 7, "offered_tile_id": None},
    ) == ProposeTrade(initiator_id=0, target_id=1, requested_tile_id=7)


@pytest.mark.parametrize(
    "action_type,params",
    [
        ("teleport", {}),
        ("build_house", {}),
        ("build_house", {"tile_id": "7"}),
        ("build_house", {"tile_id": True}),
        ("roll_dice", {"times": 2}),
        ("resolve_bailout", {"accept": "yes"}),
        ("post_chat_message", {"sender": "Alice", "text": 5}),
    ],
)
def test_parse_action_rejects_bad_input(action_type, params):
    with pytest.raises(InvalidActionError):
        parse_action(action_type, params)


def test_action_to_dict():
    action = BuildHouse(tile_id=7)
    assert action.to_dict() == {"action_type": "build_house", "params": {"tile_id": 7}}
    assert RollDice().to_dict() == {"action_type": "roll_dice", "params": {}}
