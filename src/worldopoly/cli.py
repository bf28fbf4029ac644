"""
Headless CLI for simulating Worldopoly games.

Every seat, the human one included, is played by the turn planner so a
whole game runs without input. Useful for eyeballing the engine and for
smoke-testing an LLM endpoint.
"""

import argparse
import logging
import random
from typing import List, Optional

from worldopoly.core.agents import AutoPlayer, HeuristicOracle, LLMOracle
from worldopoly.core.agents.personas import DEFAULT_AI_MODELS, seat_names
from worldopoly.core.game import GameConfig, GameState, apply_action, create_game
from worldopoly.core.game.dice import make_rng

logger = logging.getLogger(__name__)

MAX_STEPS = 20000


def print_game_state(state: GameState) -> None:
    """Print current game state."""
    print("\n" + "=" * 60)
    print(f"TURN {state.turn_number}")
    print("=" * 60)

    for player in state.players:
        if player.is_bankrupt:
            status = "BANKRUPT"
        elif player.is_jailed:
            status = f"IN JAIL ({player.jail_turns} turns)"
        else:
            status = f"at {state.board[player.position].name}"

        print(f"Player {player.id} ({player.name}): ${player.money} | {len(player.properties)} properties | {status}")


def print_game_summary(state: GameState) -> None:
    """Print final game summary."""
    print("\n" + "=" * 60)
    print("GAME OVER" if state.game_over else "TURN LIMIT REACHED")
    print("=" * 60)

    if state.winner is not None:
        winner = state.get_player(state.winner)
        print(f"\nWinner: {winner.name}")
        print(f"Final Cash: ${winner.money}")
        print(f"Properties Owned: {len(winner.properties)}")

    print("\nFinal Standings:")
    for player in sorted(state.players, key=lambda p: (p.is_bankrupt, -p.money)):
        status = "BANKRUPT" if player.is_bankrupt else f"${player.money}"
        print(f"  {player.name}: {status}")

    print(f"\nTotal Turns: {state.turn_number}")


def simulate_game(
    player_name: str = "Human",
    ai_models: Optional[List[str]] = None,
    seed: Optional[int] = None,
    max_turns: Optional[int] = 500,
    use_llm: bool = False,
    verbose: bool = True,
) -> GameState:
    """
    Simulate a complete game.

    Args:
        player_name: Name of seat 0
        ai_models: Model ids for the AI seats (1-3)
        seed: Random seed for reproducibility
        max_turns: Stop after this many turns (None = play to the end)
        use_llm: Ask the configured LLM instead of the heuristic
        verbose: Whether to print progress

    Returns:
        The final game state
    """
    models = list(ai_models or DEFAULT_AI_MODELS)
    names = [player_name] + seat_names(models)
    state = create_game(names, GameConfig(seed=seed))
    rng = make_rng(seed)

    oracle = LLMOracle() if use_llm else HeuristicOracle()
    planner = AutoPlayer(
        oracle,
        models={index + 1: model for index, model in enumerate(models)},
        rng=random.Random(seed),
        play_human=True,
    )

    if verbose:
        print(f"Starting game: {', '.join(names)}")
        print(f"Seed: {seed}")

    last_event = 0
    last_turn = -1
    try:
        for _ in range(MAX_STEPS):
            if state.game_over or (max_turns is not None and state.turn_number >= max_turns):
                break

            actions = planner.plan(state)
            if not actions:
                logger.warning("No move planned at turn %d; stopping", state.turn_number)
                break
            for action in actions:
                state = apply_action(state, action, rng)

            for event in state.events[last_event:]:
                logger.info("%r", event)
            last_event = len(state.events)

            if verbose and state.turn_number != last_turn and state.turn_number % 20 == 0:
                last_turn = state.turn_number
                print_game_state(state)
    finally:
        oracle.close()

    if verbose:
        print_game_summary(state)
    return state


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate a Worldopoly game")
    parser.add_argument("--name", default="Human", help="Name of the first seat")
    parser.add_argument(
        "--ai-models",
        nargs="+",
        default=None,
        help="Model ids for the AI seats (up to 3)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--max-turns", type=int, default=500, help="Stop after this many turns")
    parser.add_argument("--llm", action="store_true", help="Use the configured LLM oracle")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (e.g. INFO to see every event)")
    args = parser.parse_args(argv)

    if args.ai_models is not None and not 1 <= len(args.ai_models) <= 3:
        parser.error("--ai-models takes between 1 and 3 model ids")

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    state = simulate_game(
        player_name=args.name,
        ai_models=args.ai_models,
        seed=args.seed,
        max_turns=args.max_turns,
        use_llm=args.llm,
        verbose=not args.quiet,
    )
    if args.quiet:
        print_game_summary(state)


if __name__ == "__main__":
    main()
