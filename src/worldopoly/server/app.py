from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from worldopoly.core.agents import DecisionOracle
from worldopoly.core.agents.base import DecisionRequest, DecisionResult
from worldopoly.core.exceptions import GameNotFoundError, InvalidActionError, ValidationError
from worldopoly.server.registry import GameRegistry
from worldopoly.server.schemas import (
    ActionRequest,
    ActionResponse,
    CreateGameRequest,
    CreateGameResponse,
    LegalActionsResponse,
    SpeedRequest,
    TradeDialogRequest,
)
from worldopoly.settings import get_arena_settings

logger = logging.getLogger(__name__)

registry = GameRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - stop every running game on shutdown."""
    logger.info("Starting Worldopoly server")
    yield
    logger.info("Shutting down; stopping running games")
    await registry.stop_all()


app = FastAPI(title="Worldopoly Server", version="0.1.0", lifespan=lifespan)


@app.exception_handler(GameNotFoundError)
async def game_not_found_handler(request: Request, exc: GameNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidActionError)
async def invalid_action_handler(request: Request, exc: InvalidActionError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---- Dependencies ----
def get_decision_oracle() -> Iterator[DecisionOracle]:
    oracle = registry.make_oracle()
    try:
        yield oracle
    finally:
        oracle.close()


@app.post("/games", response_model=CreateGameResponse)
async def create_game(req: CreateGameRequest):
    gid = await registry.create_game(
        player_name=req.player_name,
        ai_models=req.ai_models,
        seed=req.seed,
        tick_ms=req.tick_ms,
    )
    return CreateGameResponse(game_id=gid)


@app.get("/games/{game_id}/snapshot")
async def get_snapshot(game_id: str):
    runner = await registry.get(game_id)
    return await runner.snapshot()


@app.get("/games/{game_id}/legal_actions", response_model=LegalActionsResponse)
async def legal_actions(game_id: str, player_id: Optional[int] = None):
    runner = await registry.get(game_id)
    acts = await runner.get_legal_actions(player_id)
    return LegalActionsResponse(game_id=game_id, player_id=player_id, actions=acts)


@app.post("/games/{game_id}/actions", response_model=ActionResponse)
async def apply_action(game_id: str, req: ActionRequest):
    runner = await registry.get(game_id)
    ok, reason = await runner.apply_action_request(req.action_type, req.params, req.player_id)
    return ActionResponse(accepted=ok, reason=None if ok else reason)


@app.post("/games/{game_id}/trade_dialog")
async def set_trade_dialog(game_id: str, req: TradeDialogRequest):
    runner = await registry.get(game_id)
    await runner.set_trade_dialog(req.open)
    return await runner.status()


@app.get("/games/{game_id}/status")
async def get_status(game_id: str):
    runner = await registry.get(game_id)
    return await runner.status()


@app.post("/games/{game_id}/speed")
async def set_speed(game_id: str, req: SpeedRequest):
    runner = await registry.get(game_id)
    await runner.set_tick_ms(req.tick_ms)
    return await runner.status()


@app.delete("/games/{game_id}")
async def delete_game(game_id: str):
    await registry.stop(game_id)
    return {"game_id": game_id, "stopped": True}


@app.post("/ai-decision")
def ai_decision(req: DecisionRequest, oracle: DecisionOracle = Depends(get_decision_oracle)) -> DecisionResult:
    """Stateless oracle verdict for a supplied request."""
    return oracle.decide(req)


if __name__ == "__main__":
    import uvicorn

    settings = get_arena_settings()
    uvicorn.run("worldopoly.server.app:app", host=settings.host, port=settings.port)
