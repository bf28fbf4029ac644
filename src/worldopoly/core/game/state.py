"""
Immutable game state.

A GameState is never mutated: every engine operation returns a new value
built with ``dataclasses.replace``. Helpers here only assemble new values;
the rules live in ``engine``, ``trading`` and ``bankruptcy``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Tuple

from worldopoly.core.game.config import GameConfig
from worldopoly.core.game.events import EventType, GameEvent
from worldopoly.core.game.player import Player
from worldopoly.core.game.tiles import Tile, TileType

SYSTEM_SENDER = "System"
SYSTEM_COLOR = "#999"


class GamePhase(str, Enum):
    """Per-turn sub-state."""

    ROLL = "ROLL"
    ACTION = "ACTION"
    END_TURN = "END_TURN"


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    message: str
    color: str


@dataclass(frozen=True)
class DrawnCard:
    text: str
    deck: TileType


@dataclass(frozen=True)
class RentPayment:
    payer_id: int
    payee_id: int
    amount: int


@dataclass(frozen=True)
class JailFine:
    payer_id: int
    amount: int


@dataclass(frozen=True)
class TradeProposal:
    """Initiator asks for ``requested_tile_id`` in exchange for cash and an optional tile."""

    initiator_id: int
    target_id: int
    requested_tile_id: int
    offered_tile_id: Optional[int] = None
    cash: int = 0


@dataclass(frozen=True)
class PendingBailout:
    player_id: int


@dataclass(frozen=True)
class GameState:
    """Represents the complete state of a game."""

    players: Tuple[Player, ...]
    board: Tuple[Tile, ...]
    config: GameConfig = field(default_factory=GameConfig)
    current_player_index: int = 0
    turn_number: int = 0
    dice: Tuple[int, int] = (1, 1)
    is_doubles: bool = False
    doubles_count: int = 0
    phase: GamePhase = GamePhase.ROLL
    events: Tuple[GameEvent, ...] = ()
    chat: Tuple[ChatMessage, ...] = ()
    winner: Optional[int] = None
    pending_trade: Optional[TradeProposal] = None
    pending_bailout: Optional[PendingBailout] = None
    last_drawn_card: Optional[DrawnCard] = None
    last_rent_payment: Optional[RentPayment] = None
    last_jail_fine: Optional[JailFine] = None

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def current_tile(self) -> Tile:
        return self.board[self.current_player.position]

    @property
    def logs(self) -> Tuple[str, ...]:
        return tuple(e.message for e in self.events)

    @property
    def game_over(self) -> bool:
        return self.winner is not None

    def get_player(self, player_id: Optional[int]) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_tile(self, tile_id: Optional[int]) -> Optional[Tile]:
        if tile_id is None or not 0 <= tile_id < len(self.board):
            return None
        return self.board[tile_id]

    def active_players(self) -> List[Player]:
        """All non-bankrupt players."""
        return [p for p in self.players if not p.is_bankrupt]

    def with_player(self, player: Player) -> "GameState":
        return replace(self, players=tuple(player if p.id == player.id else p for p in self.players))

    def with_tile(self, tile: Tile) -> "GameState":
        return replace(self, board=tuple(tile if t.id == tile.id else t for t in self.board))

    def log(
        self,
        event_type: EventType,
        message: str,
        player_id: Optional[int] = None,
        **details: Any,
    ) -> "GameState":
        """Append a narrative event."""
        event = GameEvent(event_type, message, player_id, details)
        return replace(self, events=self.events + (event,))

    def say(self, sender: str, message: str, color: str) -> "GameState":
        """Append a chat line."""
        return replace(self, chat=self.chat + (ChatMessage(sender, message, color),))

    def say_as(self, player: Player, message: str) -> "GameState":
        return self.say(player.name, message, player.color)

    def clear_hints(self) -> "GameState":
        return replace(self, last_drawn_card=None, last_rent_payment=None, last_jail_fine=None)
