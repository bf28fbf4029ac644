from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from worldopoly.core.agents import AutoPlayer, HeuristicOracle
from worldopoly.core.exceptions import InvalidActionError, LLMError
from worldopoly.core.game.rules import (
    HUMAN_PLAYER_ID,
    Action,
    ActionType,
    BuildHouse,
    PostChatMessage,
    ProposeTrade,
    apply_action,
    get_legal_actions,
    parse_action,
)
from worldopoly.core.game.state import GameState
from worldopoly.snapshot import serialize_snapshot

logger = logging.getLogger(__name__)

# Actions the presentation layer may send at any time; the engine decides
# whether they do anything.
UNGATED_ACTIONS = {
    ActionType.POST_CHAT_MESSAGE,
    ActionType.DISMISS_CARD_POPUP,
    ActionType.PROPOSE_TRADE,
}

CHAT_REPLY_DELAY = (1.5, 3.5)


class GameRunner:
    """Owns a single GameState and paces AI turns asynchronously.

    Responsibilities:
    - Hold the current state and the game's random source
    - Apply every action under one lock
    - Keep at most one pending AI timer, rescheduled after every change
    - Pause while a human decision is pending or it is the human's turn
    - Forward newly appended engine events to the logger
    """

    def __init__(
        self,
        game_id: str,
        state: GameState,
        autoplayer: AutoPlayer,
        rng: Optional[random.Random] = None,
        tick_ms: Optional[int] = 1000,
        oracle_timeout: float = 15.0,
    ):
        self.game_id = game_id
        self.state = state
        self.autoplayer = autoplayer
        self.fallback = AutoPlayer(HeuristicOracle(), models=autoplayer.models, rng=autoplayer.rng)
        self.rng = rng or random.Random(state.config.seed)
        self.oracle_timeout = oracle_timeout
        self.trade_dialog_open = False
        self._tick: float = max(0.0, (tick_ms or 0) / 1000.0)
        self._lock = asyncio.Lock()
        self._timer: Optional[asyncio.Task] = None
        self._chat_task: Optional[asyncio.Task] = None
        self._last_event_idx = 0
        self._stopped = False

    @property
    def paused(self) -> bool:
        state = self.state
        return (
            state.game_over
            or state.pending_trade is not None
            or state.pending_bailout is not None
            or self.trade_dialog_open
            or not state.current_player.is_ai
        )

    async def start(self) -> None:
        self._flush_events()
        self._schedule()

    async def stop(self) -> None:
        self._stopped = True
        for task in (self._timer, self._chat_task):
            if task is not None and not task.done():
                task.cancel()
        self._timer = None
        self._chat_task = None
        self.autoplayer.oracle.close()

    def _schedule(self) -> None:
        """Replace the pending AI timer, if any, with a fresh one."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        if self._stopped or self.paused:
            return
        self._timer = asyncio.create_task(self._run_timer())

    async def _run_timer(self) -> None:
        await asyncio.sleep(self._tick)
        # The timer has fired; rescheduling from here must not cancel it
        self._timer = None
        await self.step()

    async def step(self) -> bool:
        """
        Plan and apply the current AI seat's next actions.

        Returns:
            True if the state changed
        """
        if self.paused:
            return False

        planned_from = self.state
        actions = await self._plan(planned_from)

        async with self._lock:
            if self.state is not planned_from:
                # Someone else moved first; plan again on the next tick
                self._schedule()
                return False
            before = self.state
            for action in actions:
                self.state = apply_action(self.state, action, self.rng)
            changed = self.state is not before
            self._flush_events()

        if changed:
            self._schedule()
        elif actions:
            logger.warning("Game %s: AI plan %s had no effect; pausing", self.game_id, actions)
        return changed

    async def _plan(self, state: GameState) -> List[Action]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.autoplayer.plan, state), timeout=self.oracle_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Game %s: oracle timed out after %.1fs; using heuristic", self.game_id, self.oracle_timeout)
        except (LLMError, httpx.HTTPError, PydanticValidationError, ValueError) as e:
            logger.warning("Game %s: oracle failed (%s); using heuristic", self.game_id, e)
        return self.fallback.plan(state)

    def _flush_events(self) -> None:
        """Log engine events appended since the last flush."""
        events = self.state.events
        for event in events[self._last_event_idx:]:
            logger.info("[%s] %r", self.game_id, event)
        self._last_event_idx = len(events)

    # ---- External control helpers ----
    async def get_legal_actions(self, player_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return legal actions for given player (or the human)."""
        pid = HUMAN_PLAYER_ID if player_id is None else player_id
        return [a.to_dict() for a in get_legal_actions(self.state, pid)]

    async def apply_action_request(
        self,
        action_type: str,
        params: Optional[Dict[str, Any]] = None,
        player_id: Optional[int] = None,
    ) -> Tuple[bool, str]:
        """Try to apply an action for a player. Returns (accepted, reason)."""
        pid = HUMAN_PLAYER_ID if player_id is None else player_id
        try:
            action = parse_action(action_type, params)
        except InvalidActionError as e:
            return False, str(e)

        async with self._lock:
            if not self._is_permitted(action, pid):
                return False, "action not legal for player"

            before = self.state
            self.state = apply_action(self.state, action, self.rng)
            self._flush_events()
            accepted = self.state is not before

        if accepted and isinstance(action, PostChatMessage) and pid == HUMAN_PLAYER_ID:
            self._schedule_chat_reply(action.text)
        self._schedule()
        return (True, "") if accepted else (False, "action had no effect")

    def _is_permitted(self, action: Action, player_id: int) -> bool:
        if action.action_type in UNGATED_ACTIONS:
            if isinstance(action, ProposeTrade):
                return action.initiator_id == player_id
            return True
        legal = get_legal_actions(self.state, player_id)
        if isinstance(action, BuildHouse):
            return action in legal
        return any(a.action_type == action.action_type for a in legal)

    def _schedule_chat_reply(self, text: str) -> None:
        if self._chat_task is not None and not self._chat_task.done():
            self._chat_task.cancel()
        self._chat_task = asyncio.create_task(self._reply_later(text))

    async def _reply_later(self, text: str) -> None:
        delay = random.uniform(*CHAT_REPLY_DELAY) if self._tick else 0.0
        await asyncio.sleep(delay)
        async with self._lock:
            reply = self.autoplayer.reply_to_chat(self.state, text)
            if reply is not None:
                self.state = apply_action(self.state, reply, self.rng)
        self._chat_task = None

    async def set_trade_dialog(self, open_: bool) -> None:
        self.trade_dialog_open = open_
        self._schedule()

    async def set_tick_ms(self, tick_ms: int) -> None:
        self._tick = max(0.0, (tick_ms or 0) / 1000.0)
        self._schedule()

    # ---- Status helpers ----
    async def snapshot(self) -> Dict[str, Any]:
        return serialize_snapshot(self.state)

    async def status(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "turn_number": self.state.turn_number,
            "current_player_id": self.state.current_player.id,
            "phase": self.state.phase.value,
            "game_over": self.state.game_over,
            "winner": self.state.winner,
            "paused": self.paused,
            "trade_dialog_open": self.trade_dialog_open,
            "tick_ms": int(self._tick * 1000),
        }
