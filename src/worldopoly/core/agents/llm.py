"""LLM-powered decision oracle using an OpenAI-compatible API (Groq, Ollama, vLLM)."""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from worldopoly.core.agents.base import (
    BuyDecision,
    DecisionOracle,
    DecisionRequest,
    TradeDecision,
)
from worldopoly.core.agents.heuristic import DEFAULT_CHAT, HeuristicOracle
from worldopoly.core.agents.personas import ModelPersona, get_persona
from worldopoly.core.exceptions import LLMError
from worldopoly.settings import get_llm_settings

logger = logging.getLogger(__name__)

BUY_MAX_TOKENS = 150
TRADE_MAX_TOKENS = 200
CHAT_MAX_TOKENS = 50
CHAT_TEMPERATURE = 0.9
MAX_CHAT_LENGTH = 120
MAX_REASONING_LENGTH = 200

M = TypeVar("M", bound=BaseModel)


class LLMOracle(DecisionOracle):
    """
    Oracle that asks a language model via an OpenAI-compatible API.

    Every request is sent to ``/chat/completions`` with the persona of the
    requested model id folded into the system prompt. A malformed answer is
    retried once with the error fed back to the model; if that also fails,
    or the endpoint cannot be reached, the heuristic oracle answers instead.

    Configuration via environment variables (see LLMSettings in `settings.py`):
        LLM_PROVIDER: Backend provider (groq | ollama | vllm | openai | custom)
        LLM_BASE_URL: Base URL for API
        LLM_API_KEY: API key for authenticated providers
        LLM_TIMEOUT_SECONDS: Request timeout in seconds
        LLM_MAX_TOKENS: Upper bound on response tokens

    Attributes:
        base_url: Base URL for the OpenAI-compatible API.
        decision_callback: Optional callback receiving one dict per decision.
    """

    MAX_ATTEMPTS = 2

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        fallback: Optional[DecisionOracle] = None,
        decision_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        settings = get_llm_settings()
        self.base_url = base_url or settings.base_url or "http://localhost:11434/v1"
        if api_key is None and settings.api_key is not None:
            api_key = settings.api_key.get_secret_value()
        self.api_key = api_key
        self.timeout_seconds = float(timeout_seconds or settings.timeout_seconds)
        self.max_tokens = int(settings.max_tokens)
        self.fallback = fallback or HeuristicOracle()
        self.decision_callback = decision_callback
        self._client = client
        self._owns_client = client is None
        self._decision_count = 0

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout_seconds)
        return self._client

    def decide_buy(self, request: DecisionRequest) -> BuyDecision:
        persona = get_persona(request.model_identifier)
        system = (
            f"You are playing Monopoly. {persona.strategy}\n\n"
            'You must respond in JSON format: {"decision": "BUY" or "PASS", "reasoning": "brief explanation"}'
        )
        prompt = self._build_buy_prompt(request, persona)
        decision, used_fallback = self._ask(
            request, persona, system, prompt, BuyDecision, BUY_MAX_TOKENS
        )
        if used_fallback:
            return self.fallback.decide_buy(request)
        return decision

    def decide_trade(self, request: DecisionRequest) -> TradeDecision:
        persona = get_persona(request.model_identifier)
        system = (
            f"You are playing Monopoly. {persona.strategy}\n\n"
            'You must respond in JSON format: {"shouldTrade": true/false, "offerAmount": number, '
            '"reasoning": "brief explanation"}'
        )
        prompt = self._build_trade_prompt(request, persona)
        decision, used_fallback = self._ask(
            request, persona, system, prompt, TradeDecision, TRADE_MAX_TOKENS
        )
        if used_fallback:
            return self.fallback.decide_trade(request)
        # The model may not offer more cash than the player holds
        offer = min(decision.offer_amount, max(request.player.money, 0))
        return decision.model_copy(update={"offer_amount": offer})

    def chat_message(self, request: DecisionRequest) -> str:
        persona = get_persona(request.model_identifier)
        context = request.board_context
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are {request.player.name}, a {persona.personality} Monopoly player. "
                    "Respond with a short, in-character comment (max 15 words) about the game "
                    "event. Be conversational and show personality."
                ),
            },
            {"role": "user", "content": f"Event: {context.event}\nContext: {context.details}\n\nYour response:"},
        ]
        try:
            content = self._query_llm(
                request.model_identifier, messages, CHAT_TEMPERATURE, CHAT_MAX_TOKENS, json_mode=False
            )
        except (LLMError, httpx.HTTPError, ValueError) as e:
            logger.warning("LLM chat failed for %s: %s", request.player.name, e)
            return DEFAULT_CHAT
        return content.strip().strip('"')[:MAX_CHAT_LENGTH] or DEFAULT_CHAT

    def _ask(
        self,
        request: DecisionRequest,
        persona: ModelPersona,
        system: str,
        prompt: str,
        model_cls: Type[M],
        max_tokens: int,
    ) -> Tuple[Optional[M], bool]:
        """
        Query the model and validate its JSON answer, retrying once on failure.

        Returns:
            Tuple of (parsed answer or None, used_fallback)
        """
        start_time = time.time()
        self._decision_count += 1

        raw_response = ""
        error_msg: Optional[str] = None
        result: Optional[M] = None
        user_prompt = prompt

        for attempt in range(self.MAX_ATTEMPTS):
            if attempt > 0:
                user_prompt = self._build_retry_prompt(prompt, raw_response, error_msg or "invalid response")
                logger.info(
                    "LLM oracle for %s: retry attempt %d/%d", request.player.name, attempt + 1, self.MAX_ATTEMPTS
                )
            messages = [
                {"role": "system", "content": system},
                {"role": "user", "content": user_prompt},
            ]
            try:
                raw_response = self._query_llm(
                    request.model_identifier,
                    messages,
                    persona.temperature,
                    min(max_tokens, self.max_tokens),
                    json_mode=True,
                )
                result = self._parse_response(raw_response, model_cls)
                break
            except (LLMError, httpx.HTTPError, PydanticValidationError, ValueError) as e:
                error_msg = str(e)
                logger.warning(
                    "LLM error for %s (attempt %d): %s", request.player.name, attempt + 1, error_msg
                )
                result = None

        used_fallback = result is None
        if result is not None and hasattr(result, "reasoning"):
            result = result.model_copy(update={"reasoning": result.reasoning[:MAX_REASONING_LENGTH]})

        processing_time_ms = int((time.time() - start_time) * 1000)
        if self.decision_callback:
            decision_data = {
                "player": request.player.name,
                "decision_kind": request.decision_kind.value,
                "sequence_number": self._decision_count,
                "model_version": request.model_identifier,
                "prompt": prompt,
                "raw_response": raw_response,
                "decision": result.model_dump() if result is not None else None,
                "used_fallback": used_fallback,
                "error": error_msg,
                "processing_time_ms": processing_time_ms,
            }
            try:
                self.decision_callback(decision_data)
            except Exception as cb_err:
                logger.error("Decision callback error: %s", cb_err)

        logger.info(
            "LLM oracle answered %s for %s (fallback=%s, time=%dms)",
            request.decision_kind.value,
            request.player.name,
            used_fallback,
            processing_time_ms,
        )
        return result, used_fallback

    def _build_buy_prompt(self, request: DecisionRequest, persona: ModelPersona) -> str:
        player = request.player
        ctx = request.board_context
        prompt_parts = [
            "PROPERTY DECISION:",
            f"Property: {ctx.tile_name}",
            f"Price: ${ctx.price}",
            f"Group: {ctx.group}",
            f"Rent: ${ctx.base_rent}",
            "",
            "YOUR SITUATION:",
            f"Current Money: ${player.money}",
            f"Properties Owned: {player.property_count}",
            f"You own {ctx.group_owned}/{ctx.group_size} properties in the {ctx.group} group",
            "",
            "GAME STATE:",
            f"Current Turn: {ctx.turn}",
            f"Other Players: {ctx.opponents}",
            "",
            f"Should you BUY or PASS on {ctx.tile_name}?",
            f"Consider: Your cash reserves, potential for monopoly, and your {persona.personality} playing style.",
        ]
        return "\n".join(prompt_parts)

    def _build_trade_prompt(self, request: DecisionRequest, persona: ModelPersona) -> str:
        player = request.player
        ctx = request.board_context
        if persona.temperature > 0.7:
            style = "aggressive"
        elif persona.temperature > 0.5:
            style = "moderate"
        else:
            style = "conservative"

        prompt_parts = [
            "TRADE DECISION:",
            f"Target Property: {ctx.tile_name}",
            f"Owner: {ctx.owner_name}",
            f"Property Price: ${ctx.price}",
            f"Group: {ctx.group}",
            "",
            "YOUR SITUATION:",
            f"Current Money: ${player.money}",
            f"You own {ctx.group_owned}/{ctx.group_size} properties in the {ctx.group} group",
        ]
        if ctx.group_owned > 0:
            prompt_parts.append(f"This would help complete your {ctx.group} monopoly!")
        prompt_parts.extend([
            "",
            "Should you offer a trade? If yes, how much money should you offer?",
            f"Max offer: ${player.money}",
            "Consider: Fair market value is typically 100-120% of property price.",
            f"Your {persona.personality} style suggests {style} offers.",
        ])
        return "\n".join(prompt_parts)

    def _build_retry_prompt(self, original_prompt: str, bad_response: str, error: str) -> str:
        """Build retry prompt with error feedback."""
        return f"""{original_prompt}

## IMPORTANT: Your previous response was INVALID!

**Error:** {error}

**Your invalid response was:**
{bad_response[:500] if bad_response else "(empty response)"}

**Please fix your response.** You MUST respond with ONLY a valid JSON object, nothing else.
No text before or after the JSON. No markdown code blocks.

Respond now with the correct JSON:"""

    def _query_llm(
        self,
        model_id: str,
        messages: list,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        """Query the LLM using the OpenAI-compatible chat completions API."""
        url = f"{self.base_url.rstrip('/')}/chat/completions"

        payload: Dict[str, Any] = {
            "model": model_id,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = self.client.post(
            url,
            json=payload,
            headers=headers or None,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

        result = response.json()
        choices = result.get("choices") or []
        if not choices:
            raise LLMError("Invalid LLM response format")

        content = (choices[0].get("message") or {}).get("content") or ""
        content = content.strip()
        if not content:
            raise LLMError("LLM returned empty response")
        return content

    def _parse_response(self, raw_response: str, model_cls: Type[M]) -> M:
        """
        Extract the JSON object from a model answer and validate it.

        Raises:
            ValueError: no JSON object found or invalid JSON
            pydantic.ValidationError: JSON does not match the expected shape
        """
        text = raw_response.strip()
        json_start = text.find("{")
        json_end = text.rfind("}") + 1
        if json_start == -1 or json_end == 0:
            raise ValueError(f"No JSON found in response: {text[:100]}")

        data = json.loads(text[json_start:json_end])
        return model_cls.model_validate(data)

    def close(self) -> None:
        """Clean up resources."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
