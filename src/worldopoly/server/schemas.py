from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CreateGameRequest(BaseModel):
    player_name: str = Field("Human", min_length=1, max_length=32)
    ai_models: Optional[List[str]] = Field(default=None, min_length=1, max_length=3)
    seed: Optional[int] = None
    tick_ms: Optional[int] = Field(default=None, ge=0, le=10000)


class CreateGameResponse(BaseModel):
    game_id: str


class ActionRequest(BaseModel):
    player_id: Optional[int] = None
    action_type: str
    params: Dict[str, Any] = Field(default_factory=dict)


class ActionResponse(BaseModel):
    accepted: bool
    reason: Optional[str] = None


class LegalActionsResponse(BaseModel):
    game_id: str
    player_id: Optional[int] = None
    actions: List[Dict[str, Any]]


class TradeDialogRequest(BaseModel):
    open: bool


class SpeedRequest(BaseModel):
    tick_ms: int = Field(ge=0, le=10000)
