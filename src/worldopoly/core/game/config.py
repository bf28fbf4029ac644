"""
Game configuration settings.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a game. Carried inside every GameState."""

    starting_cash: int = 1500
    go_salary: int = 200
    jail_fine: int = 50
    jail_position: int = 10

    max_jail_turns: int = 3
    max_doubles: int = 3

    bankruptcy_floor: int = 200
    bailout_amount: int = 500
    max_bailouts: int = 3

    # Acceptance multipliers applied to the requested tile's price
    trade_markup: float = 1.2
    ai_trade_markup: float = 1.0
    group_bonus: int = 100

    seed: Optional[int] = None
