"""
Injectable randomness.

Every random decision in the engine (dice, card draws, flavor text) goes
through a ``RandomSource``. ``random.Random`` satisfies the protocol, so a
seeded instance makes whole games reproducible.
"""

import random
from typing import Optional, Protocol, Sequence, Tuple, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...

    def choice(self, seq: Sequence[T]) -> T: ...


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


def roll_dice(rng: RandomSource) -> Tuple[int, int]:
    """Roll two six-sided dice."""
    return rng.randint(1, 6), rng.randint(1, 6)
