"""Model personalities used to flavor LLM prompts and name AI seats."""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class ModelPersona:
    name: str
    personality: str
    strategy: str
    temperature: float


DEFAULT_MODEL_ID = "llama-3.1-8b-instant"
DEFAULT_AI_MODELS = ["llama-3.3-70b-versatile", "llama-3.1-8b-instant", "gemma2-9b-it"]

MODEL_CONFIGS: Dict[str, ModelPersona] = {
    "llama-3.3-70b-versatile": ModelPersona(
        name="Llama 3.3",
        personality="aggressive and risk-taking",
        strategy=(
            "You are an aggressive player who takes calculated risks. You prioritize building "
            "monopolies quickly and are willing to spend most of your money to dominate the board."
        ),
        temperature=0.8,
    ),
    "llama-3.1-8b-instant": ModelPersona(
        name="Llama 8B",
        personality="balanced and strategic",
        strategy=(
            "You are a balanced player who carefully weighs risks and rewards. You maintain a "
            "healthy cash reserve while building your property portfolio."
        ),
        temperature=0.6,
    ),
    "mixtral-8x7b-32768": ModelPersona(
        name="Mixtral",
        personality="conservative and cautious",
        strategy=(
            "You are a conservative player who prioritizes cash reserves and only buys properties "
            "when you have a significant buffer. You avoid risky trades."
        ),
        temperature=0.4,
    ),
    "gemma2-9b-it": ModelPersona(
        name="Gemma 2",
        personality="opportunistic and tactical",
        strategy=(
            "You are an opportunistic player who looks for good deals and strategic positions. "
            "You are willing to trade aggressively to complete monopolies."
        ),
        temperature=0.7,
    ),
    "qwen-qwq-32b": ModelPersona(
        name="Qwen QwQ",
        personality="analytical and methodical",
        strategy=(
            "You are a highly analytical player who excels at complex reasoning. You carefully "
            "evaluate each decision using mathematical logic and probability theory."
        ),
        temperature=0.5,
    ),
    "moonshotai/Kimi-K2-Instruct-0905": ModelPersona(
        name="Kimi K2",
        personality="adaptive and intelligent",
        strategy=(
            "You are an agentic player with advanced reasoning capabilities. You adapt your "
            "strategy dynamically based on game state and opponent behavior."
        ),
        temperature=0.65,
    ),
}


def get_persona(model_id: str) -> ModelPersona:
    """Persona for a model id; unknown ids get the default persona."""
    return MODEL_CONFIGS.get(model_id, MODEL_CONFIGS[DEFAULT_MODEL_ID])


def display_name(model_id: str) -> str:
    """Seat name for a model id. Unknown ids are shown as-is."""
    persona = MODEL_CONFIGS.get(model_id)
    return persona.name if persona else model_id


def seat_names(model_ids: List[str]) -> List[str]:
    """Display names for AI seats, numbered when a model appears twice."""
    names: List[str] = []
    for model_id in model_ids:
        base = display_name(model_id or DEFAULT_MODEL_ID)
        name = base
        suffix = 2
        while name in names:
            name = f"{base} {suffix}"
            suffix += 1
        names.append(name)
    return names
