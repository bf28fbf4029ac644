"""
Game event types and the event record kept in GameState.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class EventType(Enum):
    """Types of game events."""

    GAME_START = "game_start"
    TURN_START = "turn_start"
    DICE_ROLL = "dice_roll"
    PASS_GO = "pass_go"
    LAND = "land"

    PURCHASE = "purchase"
    PURCHASE_DECLINED = "purchase_declined"
    PURCHASE_FAILED = "purchase_failed"

    RENT_PAYMENT = "rent_payment"
    TAX_PAYMENT = "tax_payment"

    CARD_DRAW = "card_draw"
    CARD_EFFECT = "card_effect"

    BUILD_HOUSE = "build_house"
    BUILD_HOTEL = "build_hotel"
    BUILD_FAILED = "build_failed"

    GO_TO_JAIL = "go_to_jail"
    JAIL_ATTEMPT = "jail_attempt"
    JAIL_RELEASE = "jail_release"
    JAIL_FINE_FAILED = "jail_fine_failed"

    TRADE_PROPOSED = "trade_proposed"
    TRADE_QUEUED = "trade_queued"
    TRADE_ACCEPTED = "trade_accepted"
    TRADE_REJECTED = "trade_rejected"
    TRADE_COUNTERED = "trade_countered"
    TRADE_REFUSED = "trade_refused"
    TRADE_EXECUTED = "trade_executed"

    BAILOUT_REQUESTED = "bailout_requested"
    BAILOUT_ACCEPTED = "bailout_accepted"
    BAILOUT_REJECTED = "bailout_rejected"
    BANKRUPTCY = "bankruptcy"
    GAME_END = "game_end"


@dataclass(frozen=True)
class GameEvent:
    """A logged event in the game: a narrative line plus structured details."""

    event_type: EventType
    message: str
    player_id: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        player_str = f"P{self.player_id}" if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.message}"
