"""
Helpers to determine which LLM/provider to use based on config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ..config import AppConfig

DEFAULT_LLM = "gemini-2.5-flash"


@dataclass
class LLMSettings:
    """
    Configuration for an LLM provider.

    Attributes:
        model: Model identifier (e.g., "gpt-4o-mini").
        api_key: API key for authentication.
        provider: "openai", "openrouter", or "gemini".
        base_url: Optional custom API base URL.
        is_google: True if using the Google GenAI SDK.
        temperature: Sampling temperature.
        max_tokens: Maximum output tokens.
    """
    model: str
    api_key: str
    provider: str
    base_url: Optional[str] = None
    is_google: bool = False
    temperature: float = 0.3
    max_tokens: int = 4000


def resolve_llm_settings(config: Optional[AppConfig] = None, override_choice: Optional[str] = None) -> LLMSettings:
    """
    Work out which LLM to call from the override, the config and the environment.

    Prioritizes `override_choice`, then `config.llm`, then the `STEPSAFE_DEFAULT_LLM`
    env var, and finally DEFAULT_LLM.

    Raises:
        RuntimeError: If the model is unknown or its API key is missing.
    """
    base_choice = (
        override_choice
        or (config.llm if config is not None else None)
        or os.environ.get("STEPSAFE_DEFAULT_LLM")
        or DEFAULT_LLM
    )
    choice = base_choice.strip()
    choice_lower = choice.lower()

    # Accept OpenRouter-style "google/gemini-*" names for the direct Gemini SDK too.
    if choice_lower.startswith("gemini-") or choice_lower.startswith("google/gemini-"):
        model_name = choice.split("/", 1)[1] if choice_lower.startswith("google/") else choice
        return LLMSettings(
            model=model_name,
            api_key=_require_env("GEMINI_API_KEY"),
            provider="gemini",
            is_google=True,
        )

    if choice_lower.startswith("or:"):
        return LLMSettings(
            model=choice[3:],
            api_key=_require_env("OPENROUTER_API_KEY"),
            provider="openrouter",
            base_url="https://openrouter.ai/api/v1",
        )

    if choice_lower.startswith("gpt-") or (
        choice_lower.startswith("o") and len(choice_lower) > 1 and choice_lower[1].isdigit()
    ):
        return LLMSettings(
            model=choice,
            api_key=_require_env("OPENAI_API_KEY"),
            provider="openai",
        )

    raise RuntimeError(
        f"Unknown LLM '{choice}'. Use gemini-* for Gemini, gpt-*/o* for OpenAI, or prefix OpenRouter models with 'or:'."
    )


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Environment variable {name} is required for the selected LLM.")
    return value
