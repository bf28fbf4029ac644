from __future__ import annotations

import asyncio
import random
import uuid
from typing import Dict, List, Optional

from worldopoly.core.agents import AutoPlayer, DecisionOracle, HeuristicOracle, LLMOracle
from worldopoly.core.agents.personas import DEFAULT_AI_MODELS, seat_names
from worldopoly.core.exceptions import GameNotFoundError, ValidationError
from worldopoly.core.game import GameConfig, create_game
from worldopoly.core.game.dice import make_rng
from worldopoly.server.runner import GameRunner
from worldopoly.settings import get_arena_settings

MAX_AI_SEATS = 3


class GameRegistry:
    """In-memory registry of running games."""

    def __init__(self, use_llm: Optional[bool] = None):
        self._games: Dict[str, GameRunner] = {}
        self._lock = asyncio.Lock()
        self._use_llm = use_llm

    def make_oracle(self) -> DecisionOracle:
        settings = get_arena_settings()
        use_llm = settings.use_llm if self._use_llm is None else self._use_llm
        return LLMOracle() if use_llm else HeuristicOracle()

    async def create_game(
        self,
        *,
        player_name: str = "Human",
        ai_models: Optional[List[str]] = None,
        seed: Optional[int] = None,
        tick_ms: Optional[int] = None,
    ) -> str:
        settings = get_arena_settings()
        models = list(ai_models) if ai_models is not None else list(DEFAULT_AI_MODELS)
        if not 1 <= len(models) <= MAX_AI_SEATS:
            raise ValidationError(f"A game needs between 1 and {MAX_AI_SEATS} AI seats, got {len(models)}")
        names = [player_name] + seat_names(models)

        state = create_game(names, GameConfig(seed=seed))
        autoplayer = AutoPlayer(
            self.make_oracle(),
            models={index + 1: model for index, model in enumerate(models)},
            rng=random.Random(seed),
        )
        game_id = uuid.uuid4().hex[:12]
        runner = GameRunner(
            game_id=game_id,
            state=state,
            autoplayer=autoplayer,
            rng=make_rng(seed),
            tick_ms=settings.tick_ms if tick_ms is None else tick_ms,
            oracle_timeout=settings.oracle_timeout_seconds,
        )
        async with self._lock:
            self._games[game_id] = runner

        await runner.start()
        return game_id

    async def get(self, game_id: str) -> GameRunner:
        runner = self._games.get(game_id)
        if runner is None:
            raise GameNotFoundError(f"Game {game_id} not found")
        return runner

    async def stop(self, game_id: str) -> None:
        async with self._lock:
            runner = self._games.pop(game_id, None)
        if runner is None:
            raise GameNotFoundError(f"Game {game_id} not found")
        await runner.stop()

    async def stop_all(self) -> None:
        async with self._lock:
            runners = list(self._games.values())
            self._games.clear()
        for runner in runners:
            await runner.stop()
