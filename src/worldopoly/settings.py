"""
Central application configuration using pydantic-settings.

This module provides typed access to environment-based configuration for:
- LLM providers (Groq, Ollama, vLLM, OpenAI-compatible endpoints)
- The game server and its AI pacing
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM backends."""

    GROQ = "groq"
    OLLAMA = "ollama"
    VLLM = "vllm"
    OPENAI = "openai"
    CUSTOM = "custom"


DEFAULT_BASE_URLS = {
    LLMProvider.GROQ: "https://api.groq.com/openai/v1",
    LLMProvider.OLLAMA: "http://localhost:11434/v1",
    LLMProvider.VLLM: "http://localhost:8000/v1",
    LLMProvider.OPENAI: "https://api.openai.com/v1",
}


class LLMSettings(BaseSettings):
    """
    Configuration for LLM provider endpoints and models.

    Environment variables (prefix: LLM_):
        LLM_PROVIDER       - groq | ollama | vllm | openai | custom (default: groq)
        LLM_BASE_URL       - Base URL for OpenAI-compatible API
        LLM_API_KEY        - API key for authenticated providers
        LLM_TIMEOUT_SECONDS- Request timeout in seconds (default: 10)
        LLM_MAX_TOKENS     - Max response tokens for decisions (default: 200)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="LLM_",
    )

    provider: LLMProvider = Field(
        default=LLMProvider.GROQ,
        description="LLM backend to use (groq | ollama | vllm | openai | custom).",
    )
    base_url: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Base URL for OpenAI-compatible API, e.g. http://localhost:11434/v1.",
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for providers that require authentication.",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP request timeout in seconds.",
    )
    max_tokens: int = Field(
        default=200,
        gt=0,
        description="Maximum number of tokens to generate.",
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def default_base_url(cls, value: Optional[str], info):
        """
        Provide defaults for base_url depending on the provider.

        - groq   -> https://api.groq.com/openai/v1
        - ollama -> http://localhost:11434/v1
        - vllm   -> http://localhost:8000/v1
        - openai -> https://api.openai.com/v1
        - custom -> must be provided explicitly
        """
        if value:
            return value

        provider = info.data.get("provider", LLMProvider.GROQ)
        if isinstance(provider, str):
            try:
                provider = LLMProvider(provider)
            except ValueError:
                provider = LLMProvider.GROQ

        return DEFAULT_BASE_URLS.get(provider, value)


class ArenaSettings(BaseSettings):
    """
    Configuration for the game server.

    Environment variables (prefix: ARENA_):
        ARENA_TICK_MS                 - Delay before each AI move (default: 1000)
        ARENA_ORACLE_TIMEOUT_SECONDS  - Max wait for an oracle answer (default: 15)
        ARENA_USE_LLM                 - Use the LLM oracle instead of the heuristic (default: false)
        ARENA_HOST                    - Bind host (default: 127.0.0.1)
        ARENA_PORT                    - Bind port (default: 8000)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="ARENA_",
    )

    tick_ms: int = Field(default=1000, ge=0)
    oracle_timeout_seconds: float = Field(default=15.0, gt=0)
    use_llm: bool = False
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0)


@lru_cache
def get_llm_settings() -> LLMSettings:
    """Return cached LLM settings instance."""
    return LLMSettings()


@lru_cache
def get_arena_settings() -> ArenaSettings:
    """Return cached server settings instance."""
    return ArenaSettings()
