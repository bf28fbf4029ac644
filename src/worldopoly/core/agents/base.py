"""
Decision oracle interface and its request/response models.

An oracle answers three kinds of question for an AI seat: should it buy the
tile it is standing on, should it make an offer for someone else's tile,
and what does it say in chat. Requests are plain pydantic models so the
same contract is used in-process and over HTTP.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from worldopoly.core.agents.personas import DEFAULT_MODEL_ID
from worldopoly.core.game.board import get_group
from worldopoly.core.game.state import GameState


class DecisionKind(str, Enum):
    BUY_DECISION = "BUY_DECISION"
    TRADE_DECISION = "TRADE_DECISION"
    CHAT_MESSAGE = "CHAT_MESSAGE"


class PlayerContext(BaseModel):
    id: int = 0
    name: str
    money: int
    property_count: int = 0


class BoardContext(BaseModel):
    """
    What the deciding player needs to know about the board.

    For buy decisions the tile is the one being stood on; for trade
    decisions it is the tile being asked for and ``owner_name`` names its
    holder. ``event`` and ``details`` only matter for chat.
    """

    tile_id: Optional[int] = None
    tile_name: str = ""
    price: int = 0
    group: Optional[str] = None
    base_rent: int = 0
    group_owned: int = 0
    group_size: int = 0
    owner_name: Optional[str] = None
    opponents: int = 0
    turn: int = 0
    event: str = ""
    details: str = ""


class DecisionRequest(BaseModel):
    decision_kind: DecisionKind
    player: PlayerContext
    board_context: BoardContext = Field(default_factory=BoardContext)
    model_identifier: str = DEFAULT_MODEL_ID


class BuyDecision(BaseModel):
    decision: Literal["BUY", "PASS"]
    reasoning: str = "No reasoning provided"

    @field_validator("decision", mode="before")
    @classmethod
    def normalize_decision(cls, value):
        if not isinstance(value, str):
            raise ValueError("decision must be a string")
        return "BUY" if value.strip().upper() == "BUY" else "PASS"


class TradeDecision(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    should_trade: bool = Field(default=False, alias="shouldTrade")
    offer_amount: int = Field(default=0, ge=0, alias="offerAmount")
    reasoning: str = "No reasoning provided"


class ChatReply(BaseModel):
    message: str


DecisionResult = Union[BuyDecision, TradeDecision, ChatReply]


class DecisionOracle(ABC):
    """
    Abstract base class for decision oracles.

    Implementations must never raise for a bad answer from their backend;
    they are expected to fall back to a safe verdict instead.
    """

    def decide(self, request: DecisionRequest) -> DecisionResult:
        """Route a request to the matching decision method."""
        if request.decision_kind == DecisionKind.BUY_DECISION:
            return self.decide_buy(request)
        if request.decision_kind == DecisionKind.TRADE_DECISION:
            return self.decide_trade(request)
        return ChatReply(message=self.chat_message(request))

    @abstractmethod
    def decide_buy(self, request: DecisionRequest) -> BuyDecision:
        pass

    @abstractmethod
    def decide_trade(self, request: DecisionRequest) -> TradeDecision:
        pass

    @abstractmethod
    def chat_message(self, request: DecisionRequest) -> str:
        pass

    def close(self) -> None:
        """Release any held resources."""


def _player_context(state: GameState, player_id: int) -> PlayerContext:
    player = state.get_player(player_id)
    return PlayerContext(
        id=player.id,
        name=player.name,
        money=player.money,
        property_count=len(player.properties),
    )


def _tile_context(state: GameState, player_id: int, tile_id: int) -> BoardContext:
    tile = state.board[tile_id]
    player = state.get_player(player_id)
    group = get_group(state.board, tile.group) if tile.group else ()
    owner = state.get_player(tile.owner_id)
    return BoardContext(
        tile_id=tile.id,
        tile_name=tile.name,
        price=tile.price,
        group=tile.group,
        base_rent=tile.rent_for(0),
        group_owned=sum(1 for t in group if t.id in player.properties),
        group_size=len(group),
        owner_name=owner.name if owner else None,
        opponents=sum(1 for p in state.active_players() if p.id != player_id),
        turn=state.turn_number,
    )


def build_buy_request(state: GameState, player_id: int, model_id: str = DEFAULT_MODEL_ID) -> DecisionRequest:
    """Buy question about the tile the player is standing on."""
    player = state.get_player(player_id)
    return DecisionRequest(
        decision_kind=DecisionKind.BUY_DECISION,
        player=_player_context(state, player_id),
        board_context=_tile_context(state, player_id, player.position),
        model_identifier=model_id,
    )


def build_trade_request(
    state: GameState, player_id: int, tile_id: int, model_id: str = DEFAULT_MODEL_ID
) -> DecisionRequest:
    """Trade question about another player's tile."""
    return DecisionRequest(
        decision_kind=DecisionKind.TRADE_DECISION,
        player=_player_context(state, player_id),
        board_context=_tile_context(state, player_id, tile_id),
        model_identifier=model_id,
    )


def build_chat_request(
    state: GameState, player_id: int, event: str, details: str = "", model_id: str = DEFAULT_MODEL_ID
) -> DecisionRequest:
    return DecisionRequest(
        decision_kind=DecisionKind.CHAT_MESSAGE,
        player=_player_context(state, player_id),
        board_context=BoardContext(event=event, details=details, turn=state.turn_number),
        model_identifier=model_id,
    )
