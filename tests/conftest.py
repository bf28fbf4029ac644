"""Shared test fixtures for Worldopoly tests."""

from dataclasses import replace
from typing import Any, Sequence

import pytest

from worldopoly.core.game import GameConfig, GameState, create_game


class ScriptedRandom:
    """
    Deterministic stand-in for ``random.Random``.

    ``randint`` pops the next scripted die value. ``choice`` returns the next
    scripted item when it belongs to the sequence being chosen from, and the
    first element otherwise, so chat flavor picks never consume scripted
    cards.
    """

    def __init__(self, dice: Sequence[int] = (), choices: Sequence[Any] = ()):
        self.dice = list(dice)
        self.choices = list(choices)

    def randint(self, a: int, b: int) -> int:
        if not self.dice:
            raise AssertionError("dice script exhausted")
        value = self.dice.pop(0)
        assert a <= value <= b
        return value

    def choice(self, seq):
        if self.choices and self.choices[0] in seq:
            return self.choices.pop(0)
        return seq[0]


@pytest.fixture
def scripted():
    """Factory for scripted random sources: scripted(3, 4, choices=[card])."""

    def make(*dice: int, choices: Sequence[Any] = ()) -> ScriptedRandom:
        return ScriptedRandom(dice, choices)

    return make


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def basic_game(game_config) -> GameState:
    """Human (Alice, id 0) against one AI (Bob, id 1)."""
    return create_game(["Alice", "Bob"], game_config)


@pytest.fixture
def four_player_game(game_config) -> GameState:
    """Human against three AI seats."""
    return create_game(["Human", "Llama 3.3", "Llama 8B", "Gemma 2"], game_config)


def set_player(state: GameState, player_id: int, **changes) -> GameState:
    return state.with_player(replace(state.get_player(player_id), **changes))


def give_tiles(state: GameState, player_id: int, *tile_ids: int, houses: int = 0) -> GameState:
    """Hand tiles to a player, keeping both sides of the ownership link in step."""
    player = state.get_player(player_id)
    for tile_id in tile_ids:
        state = state.with_tile(replace(state.board[tile_id], owner_id=player_id, houses=houses))
    return state.with_player(replace(player, properties=player.properties | set(tile_ids)))


@pytest.fixture
def update_player():
    return set_player


@pytest.fixture
def own():
    return give_tiles


def assert_ownership_consistent(state: GameState) -> None:
    """Every owned tile appears in exactly its owner's portfolio and nowhere else."""
    for tile in state.board:
        holders = [p.id for p in state.players if tile.id in p.properties]
        if tile.owner_id is None:
            assert holders == [], f"{tile.name} is unowned but held by {holders}"
        else:
            assert holders == [tile.owner_id], f"{tile.name} owner {tile.owner_id} vs holders {holders}"


@pytest.fixture
def check_ownership():
    return assert_ownership_consistent
