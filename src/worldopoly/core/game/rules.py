"""
High-level rules API for controlling game flow.

Every player decision is a small frozen Action. ``apply_action`` is the
reducer that routes an action to the engine, ``get_legal_actions`` lists
what a player may do right now, and ``parse_action`` builds an action from
the loosely-typed payloads coming in over HTTP.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type

from worldopoly.core.exceptions import InvalidActionError
from worldopoly.core.game import bankruptcy, engine, trading
from worldopoly.core.game.board import owns_group
from worldopoly.core.game.dice import RandomSource
from worldopoly.core.game.state import GamePhase, GameState, TradeProposal
from worldopoly.core.game.tiles import HOTEL

HUMAN_PLAYER_ID = 0


class ActionType(str, Enum):
    """Types of actions a player or the UI can take."""

    ROLL_DICE = "roll_dice"
    BUY_PROPERTY = "buy_property"
    PASS_PROPERTY = "pass_property"
    BUILD_HOUSE = "build_house"
    PAY_JAIL_FINE = "pay_jail_fine"
    PROPOSE_TRADE = "propose_trade"
    RESOLVE_TRADE = "resolve_trade"
    REQUEST_BAILOUT = "request_bailout"
    RESOLVE_BAILOUT = "resolve_bailout"
    ADVANCE_TURN = "advance_turn"
    DECLARE_BANKRUPTCY = "declare_bankruptcy"
    POST_CHAT_MESSAGE = "post_chat_message"
    DISMISS_CARD_POPUP = "dismiss_card_popup"


@dataclass(frozen=True)
class Action:
    """Base class for all actions."""

    action_type: ClassVar[ActionType]

    def to_dict(self) -> Dict[str, Any]:
        return {"action_type": self.action_type.value, "params": asdict(self)}

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {asdict(self)})"


@dataclass(frozen=True, repr=False)
class RollDice(Action):
    action_type: ClassVar[ActionType] = ActionType.ROLL_DICE


@dataclass(frozen=True, repr=False)
class BuyProperty(Action):
    action_type: ClassVar[ActionType] = ActionType.BUY_PROPERTY


@dataclass(frozen=True, repr=False)
class PassProperty(Action):
    action_type: ClassVar[ActionType] = ActionType.PASS_PROPERTY


@dataclass(frozen=True, repr=False)
class BuildHouse(Action):
    action_type: ClassVar[ActionType] = ActionType.BUILD_HOUSE
    tile_id: int


@dataclass(frozen=True, repr=False)
class PayJailFine(Action):
    action_type: ClassVar[ActionType] = ActionType.PAY_JAIL_FINE


@dataclass(frozen=True, repr=False)
class ProposeTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.PROPOSE_TRADE
    initiator_id: int
    target_id: int
    requested_tile_id: int
    offered_tile_id: Optional[int] = None
    cash_amount: int = 0


@dataclass(frozen=True, repr=False)
class ResolveTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.RESOLVE_TRADE
    accept: bool
    is_counter: bool = False


@dataclass(frozen=True, repr=False)
class RequestBailout(Action):
    action_type: ClassVar[ActionType] = ActionType.REQUEST_BAILOUT
    player_id: int


@dataclass(frozen=True, repr=False)
class ResolveBailout(Action):
    action_type: ClassVar[ActionType] = ActionType.RESOLVE_BAILOUT
    accept: bool


@dataclass(frozen=True, repr=False)
class AdvanceTurn(Action):
    action_type: ClassVar[ActionType] = ActionType.ADVANCE_TURN


@dataclass(frozen=True, repr=False)
class DeclareBankruptcy(Action):
    action_type: ClassVar[ActionType] = ActionType.DECLARE_BANKRUPTCY
    player_id: int


@dataclass(frozen=True, repr=False)
class PostChatMessage(Action):
    action_type: ClassVar[ActionType] = ActionType.POST_CHAT_MESSAGE
    sender: str
    text: str
    color: str = "#FFFFFF"


@dataclass(frozen=True, repr=False)
class DismissCardPopup(Action):
    action_type: ClassVar[ActionType] = ActionType.DISMISS_CARD_POPUP


ACTION_CLASSES: Dict[ActionType, Type[Action]] = {
    cls.action_type: cls
    for cls in (
        RollDice,
        BuyProperty,
        PassProperty,
        BuildHouse,
        PayJailFine,
        ProposeTrade,
        ResolveTrade,
        RequestBailout,
        ResolveBailout,
        AdvanceTurn,
        DeclareBankruptcy,
        PostChatMessage,
        DismissCardPopup,
    )
}


def apply_action(state: GameState, action: Action, rng: RandomSource) -> GameState:
    """
    Apply an action to the game state.

    This is the main interface for executing moves. Actions that are not
    legal right now return the state unchanged; once the game has a
    winner every action is ignored.

    Args:
        state: Current game state
        action: Action to apply
        rng: Random source for dice, cards and chat flavor

    Returns:
        The next game state
    """
    if state.game_over:
        return state

    if isinstance(action, RollDice):
        return engine.roll_dice(state, rng)

    elif isinstance(action, BuyProperty):
        return engine.buy_property(state)

    elif isinstance(action, PassProperty):
        return engine.pass_property(state)

    elif isinstance(action, BuildHouse):
        return engine.build_house(state, action.tile_id)

    elif isinstance(action, PayJailFine):
        return engine.pay_jail_fine(state)

    elif isinstance(action, ProposeTrade):
        proposal = TradeProposal(
            initiator_id=action.initiator_id,
            target_id=action.target_id,
            requested_tile_id=action.requested_tile_id,
            offered_tile_id=action.offered_tile_id,
            cash=action.cash_amount,
        )
        return trading.propose_trade(state, proposal, rng)

    elif isinstance(action, ResolveTrade):
        return trading.resolve_trade(state, action.accept, action.is_counter)

    elif isinstance(action, RequestBailout):
        return bankruptcy.request_bailout(state, action.player_id)

    elif isinstance(action, ResolveBailout):
        return bankruptcy.resolve_bailout(state, action.accept)

    elif isinstance(action, AdvanceTurn):
        return bankruptcy.advance_turn(state)

    elif isinstance(action, DeclareBankruptcy):
        state = bankruptcy.declare_bankruptcy(state, action.player_id)
        # A bankrupt current player cannot finish their own turn
        if not state.game_over and state.current_player.is_bankrupt:
            state = engine.rotate_turn(state)
        return state

    elif isinstance(action, PostChatMessage):
        return engine.post_chat_message(state, action.sender, action.text, action.color)

    elif isinstance(action, DismissCardPopup):
        return engine.dismiss_card_popup(state)

    raise InvalidActionError(f"Unknown action: {action!r}")


def get_legal_actions(state: GameState, player_id: int) -> List[Action]:
    """
    Get all legal actions available to a player.

    Pending decisions come first: a queued trade belongs to its target and
    a queued bailout to the human, and while either is open nobody else
    may act. The human answers bailouts even after going bankrupt. Trade
    proposals are open-ended and are not enumerated.
    """
    if state.game_over:
        return []

    player = state.get_player(player_id)
    if player is None:
        return []

    if state.pending_bailout is not None:
        if player_id == HUMAN_PLAYER_ID:
            return [ResolveBailout(accept=True), ResolveBailout(accept=False)]
        return []

    if player.is_bankrupt:
        return []

    if state.pending_trade is not None:
        if state.pending_trade.target_id == player_id:
            return [
                ResolveTrade(accept=True),
                ResolveTrade(accept=False),
                ResolveTrade(accept=False, is_counter=True),
            ]
        return []

    if state.current_player.id != player_id:
        return []

    actions: List[Action] = []
    if state.phase == GamePhase.ROLL:
        actions.append(RollDice())
        if player.is_jailed:
            actions.append(PayJailFine())
        return actions

    if state.phase == GamePhase.ACTION:
        actions.append(BuyProperty())
        actions.append(PassProperty())
    else:
        actions.append(AdvanceTurn())

    actions.extend(_get_build_actions(state, player_id))
    return actions


def _get_build_actions(state: GameState, player_id: int) -> List[Action]:
    player = state.get_player(player_id)
    actions: List[Action] = []
    for tile_id in sorted(player.properties):
        tile = state.board[tile_id]
        if (
            tile.is_buildable
            and tile.houses < HOTEL
            and player.money >= tile.house_cost
            and owns_group(state.board, player_id, tile.group)
        ):
            actions.append(BuildHouse(tile_id=tile_id))
    return actions


def parse_action(action_type: str, params: Optional[Dict[str, Any]] = None) -> Action:
    """
    Build an Action from its type name and a parameter mapping.

    Raises:
        InvalidActionError: unknown type, or missing/unexpected/mistyped params
    """
    try:
        kind = ActionType(action_type)
    except ValueError:
        raise InvalidActionError(f"Unknown action type: {action_type}") from None

    cls = ACTION_CLASSES[kind]
    params = dict(params or {})
    allowed = {f.name: f for f in fields(cls)}
    unexpected = set(params) - set(allowed)
    if unexpected:
        raise InvalidActionError(f"Unexpected parameters for {kind.value}: {sorted(unexpected)}")

    for name, value in params.items():
        expected = allowed[name].type
        if value is None:
            continue
        if expected in (int, "int", Optional[int], "Optional[int]") and (
            isinstance(value, bool) or not isinstance(value, int)
        ):
            raise InvalidActionError(f"Parameter {name} must be an integer")
        if expected in (bool, "bool") and not isinstance(value, bool):
            raise InvalidActionError(f"Parameter {name} must be a boolean")
        if expected in (str, "str") and not isinstance(value, str):
            raise InvalidActionError(f"Parameter {name} must be a string")

    try:
        return cls(**params)
    except TypeError as e:
        raise InvalidActionError(f"Invalid parameters for {kind.value}: {e}") from e
