"""
Chance and Community Chest card system.

Decks are fixed tuples. Every draw samples a card uniformly at random with
replacement, so the same card may come up twice in a row.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from worldopoly.core.game.dice import RandomSource
from worldopoly.core.game.tiles import TileType


class CardEffect(str, Enum):
    """Types of card effects."""

    MOVE = "MOVE"
    MOVE_NEAREST = "MOVE_NEAREST"
    MONEY = "MONEY"
    REPAIRS = "REPAIRS"
    GO_TO_JAIL = "GO_TO_JAIL"
    GET_OUT_OF_JAIL = "GET_OUT_OF_JAIL"


@dataclass(frozen=True)
class Card:
    """
    A Chance or Community Chest card.

    ``amount`` meaning depends on the effect:
    MONEY - signed cash delta; REPAIRS - cost per house;
    MOVE - absolute tile index when >= 0, relative backward steps when < 0.
    """

    text: str
    effect: CardEffect
    amount: int = 0
    target: Optional[TileType] = None

    def __repr__(self) -> str:
        return f"Card('{self.text}')"


CHANCE_CARDS: Tuple[Card, ...] = (
    Card("Advance to GO (Collect $200)", CardEffect.MOVE, 0),
    Card("Advance to United States", CardEffect.MOVE, 39),
    Card("Advance to nearest Utility", CardEffect.MOVE_NEAREST, target=TileType.UTILITY),
    Card("Advance to nearest Metro", CardEffect.MOVE_NEAREST, target=TileType.RAILROAD),
    Card("Bank pays you dividend of $50", CardEffect.MONEY, 50),
    Card("Get Out of Jail Free", CardEffect.GET_OUT_OF_JAIL),
    Card("Go Back 3 Spaces", CardEffect.MOVE, -3),
    Card("Go to Jail", CardEffect.GO_TO_JAIL),
    Card("Make general repairs on all your property", CardEffect.REPAIRS, 25),
    Card("Pay poor tax of $15", CardEffect.MONEY, -15),
    Card("Take a trip to Shinkansen", CardEffect.MOVE, 15),
    Card("You have been elected Chairman of the Board", CardEffect.MONEY, -50),
    Card("Your building loan matures", CardEffect.MONEY, 150),
)

COMMUNITY_CHEST_CARDS: Tuple[Card, ...] = (
    Card("Advance to GO (Collect $200)", CardEffect.MOVE, 0),
    Card("Bank error in your favor", CardEffect.MONEY, 200),
    Card("Doctor's fees", CardEffect.MONEY, -50),
    Card("From sale of stock you get $50", CardEffect.MONEY, 50),
    Card("Get Out of Jail Free", CardEffect.GET_OUT_OF_JAIL),
    Card("Go to Jail", CardEffect.GO_TO_JAIL),
    Card("Grand Opera Night", CardEffect.MONEY, 50),
    Card("Holiday Fund matures", CardEffect.MONEY, 100),
    Card("Income tax refund", CardEffect.MONEY, 20),
    Card("It is your birthday", CardEffect.MONEY, 10),
    Card("Life insurance matures", CardEffect.MONEY, 100),
    Card("Pay hospital fees of $100", CardEffect.MONEY, -100),
    Card("Pay school fees of $150", CardEffect.MONEY, -150),
    Card("Receive $25 consultancy fee", CardEffect.MONEY, 25),
    Card("You are assessed for street repairs", CardEffect.REPAIRS, 40),
    Card("You have won second prize in a beauty contest", CardEffect.MONEY, 10),
    Card("You inherit $100", CardEffect.MONEY, 100),
)


def deck_for(tile_type: TileType) -> Tuple[Card, ...]:
    """Deck drawn from when landing on a Chance or Community Chest tile."""
    if tile_type == TileType.CHANCE:
        return CHANCE_CARDS
    if tile_type == TileType.COMMUNITY_CHEST:
        return COMMUNITY_CHEST_CARDS
    raise ValueError(f"No deck for tile type {tile_type}")


def draw_card(tile_type: TileType, rng: RandomSource) -> Card:
    """Draw one card, with replacement."""
    return rng.choice(deck_for(tile_type))
