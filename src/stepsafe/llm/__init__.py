"""
LLM utilities: provider settings, client wrappers, prompts and cost logging.
"""

from .settings import DEFAULT_LLM, LLMSettings, resolve_llm_settings
from .client import consume_last_cost_cents, generate_text
from .prompts import (
    SYSTEM_PROMPT_ADVISORY,
    SYSTEM_PROMPT_DAILY_REPORT,
    build_advisory_user_prompt,
    build_daily_report_user_prompt,
)

__all__ = [
    "DEFAULT_LLM",
    "LLMSettings",
    "resolve_llm_settings",
    "consume_last_cost_cents",
    "generate_text",
    "SYSTEM_PROMPT_ADVISORY",
    "SYSTEM_PROMPT_DAILY_REPORT",
    "build_advisory_user_prompt",
    "build_daily_report_user_prompt",
]
