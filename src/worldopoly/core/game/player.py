"""
Player state.
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet

PLAYER_COLORS = ("#EF4444", "#3B82F6", "#10B981", "#F59E0B")


@dataclass(frozen=True)
class Player:
    """
    Complete, immutable state of one player.

    ``properties`` mirrors the ``owner_id`` back-references on the board and
    is kept consistent by every engine operation. ``trade_blacklist`` holds
    the ids of players this player may no longer propose trades to.
    """

    id: int
    name: str
    color: str
    money: int
    position: int = 0
    is_jailed: bool = False
    jail_turns: int = 0
    properties: FrozenSet[int] = field(default_factory=frozenset)
    is_ai: bool = False
    is_bankrupt: bool = False
    bailout_count: int = 0
    trade_blacklist: FrozenSet[int] = field(default_factory=frozenset)

    def credit(self, amount: int) -> "Player":
        return replace(self, money=self.money + amount)

    def debit(self, amount: int) -> "Player":
        return replace(self, money=self.money - amount)

    def with_property(self, tile_id: int) -> "Player":
        return replace(self, properties=self.properties | {tile_id})

    def without_property(self, tile_id: int) -> "Player":
        return replace(self, properties=self.properties - {tile_id})

    def __repr__(self) -> str:
        return (
            f"Player(id={self.id}, name='{self.name}', "
            f"money={self.money}, position={self.position}, bankrupt={self.is_bankrupt})"
        )


def create_player(player_id: int, name: str, starting_cash: int) -> Player:
    """The first seat is the human; every other seat is AI-controlled."""
    return Player(
        id=player_id,
        name=name,
        color=PLAYER_COLORS[player_id % len(PLAYER_COLORS)],
        money=starting_cash,
        is_ai=player_id > 0,
    )
