"""
Board tile definitions and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class TileType(str, Enum):
    """Types of tiles on the board."""

    GO = "GO"
    PROPERTY = "PROPERTY"
    RAILROAD = "RAILROAD"
    UTILITY = "UTILITY"
    TAX = "TAX"
    CHANCE = "CHANCE"
    COMMUNITY_CHEST = "COMMUNITY_CHEST"
    JAIL = "JAIL"
    GO_TO_JAIL = "GO_TO_JAIL"
    FREE_PARKING = "FREE_PARKING"


PURCHASABLE_TYPES = frozenset({TileType.PROPERTY, TileType.RAILROAD, TileType.UTILITY})

HOTEL = 5


@dataclass(frozen=True)
class Tile:
    """
    A board tile.

    Catalog fields (id .. group) never change during a game. ``owner_id`` and
    ``houses`` form the per-game overlay and are replaced, never mutated.
    ``houses == 5`` represents a hotel.
    """

    id: int
    name: str
    type: TileType
    price: int = 0
    rent: Tuple[int, ...] = ()
    house_cost: int = 0
    group: Optional[str] = None
    owner_id: Optional[int] = None
    houses: int = 0

    @property
    def is_purchasable(self) -> bool:
        return self.type in PURCHASABLE_TYPES and self.price > 0

    @property
    def is_buildable(self) -> bool:
        return self.type == TileType.PROPERTY and self.house_cost > 0

    def is_owned(self) -> bool:
        """Check if tile is owned by any player."""
        return self.owner_id is not None

    def has_hotel(self) -> bool:
        return self.houses == HOTEL

    def rent_for(self, houses: int) -> int:
        """Rent from the table for a given house count (0 = unimproved, 5 = hotel)."""
        if not self.rent:
            return 0
        return self.rent[min(houses, len(self.rent) - 1)]

    def __repr__(self) -> str:
        return f"Tile(id={self.id}, name='{self.name}', owner={self.owner_id}, houses={self.houses})"
