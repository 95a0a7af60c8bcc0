"""
Token usage and cost logging for LLM calls.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple

from .costs import get_model_cost

logger = logging.getLogger(__name__)

_USAGE_MESSAGE = (
    "%s – model=%s prompt_tokens=%s cached_prompt_tokens=%s completion_tokens=%s total_tokens=%s cost_usd_cents=%s"
)


def _get(obj: Any, key: str) -> Any:
    if hasattr(obj, key):
        return getattr(obj, key)
    if isinstance(obj, dict):
        return obj.get(key)
    return None


def _log_and_price(label: str, model_name: str, prompt: int, cached: int, completion: int, total: int) -> float:
    cost_entry = get_model_cost(model_name)
    cost_cents = 0.0
    cost_display = "n/a"
    if cost_entry:
        usd = cost_entry.cost_for_usage(input_tokens=prompt, output_tokens=completion, cached_input_tokens=cached)
        cost_cents = usd * 100
        cost_display = f"{cost_cents:.2f}"
    logger.info(_USAGE_MESSAGE, label, model_name, prompt, cached, completion, total, cost_display)
    return cost_cents


def log_gemini_usage_and_cost(model_name: str, usage_metadata: Any, *, label: str = "LLM usage") -> float:
    """Log Gemini usage and return estimated cost in USD cents."""
    if not usage_metadata:
        logger.info(_USAGE_MESSAGE, label, model_name, "n/a", "n/a", "n/a", "n/a", "n/a")
        return 0.0
    try:
        prompt = int(_get(usage_metadata, "prompt_token_count") or 0)
        cached = int(_get(usage_metadata, "cached_content_token_count") or 0)
        completion = int(_get(usage_metadata, "candidates_token_count") or 0)
        total = int(_get(usage_metadata, "total_token_count") or (prompt + completion))
    except (TypeError, ValueError):
        prompt, cached, completion, total = 0, 0, 0, 0
    return _log_and_price(label, model_name, prompt, cached, completion, total)


def log_openai_usage_and_cost(model_name: str, usage: Any, *, label: str = "LLM usage") -> float:
    """Log OpenAI-compatible usage and return estimated cost in USD cents."""
    if not usage:
        logger.info(_USAGE_MESSAGE, label, model_name, "n/a", "n/a", "n/a", "n/a", "n/a")
        return 0.0
    try:
        prompt, cached, completion, total = normalize_openai_usage(usage)
    except ValueError as exc:
        logger.debug("Unable to normalize LLM usage data (%s): %s", type(usage), exc)
        logger.info(_USAGE_MESSAGE, label, model_name, "n/a", "n/a", "n/a", "n/a", "n/a")
        return 0.0
    return _log_and_price(label, model_name, prompt, cached, completion, total)


def normalize_openai_usage(usage: Any) -> Tuple[int, int, int, int]:
    """Return (prompt_tokens, cached_prompt_tokens, completion_tokens, total_tokens)."""
    prompt_tokens = _get(usage, "prompt_tokens")
    if prompt_tokens is not None:
        cached = _get(_get(usage, "prompt_tokens_details") or {}, "cached_tokens") or 0
        completion = _get(usage, "completion_tokens") or 0
        total = _get(usage, "total_tokens") or (int(prompt_tokens) + int(completion))
        return int(prompt_tokens), int(cached), int(completion), int(total)

    input_tokens = _get(usage, "input_tokens")
    if input_tokens is not None:
        cached = _get(_get(usage, "input_tokens_details") or {}, "cached_tokens") or 0
        output = _get(usage, "output_tokens") or 0
        total = _get(usage, "total_tokens") or (int(input_tokens) + int(output))
        return int(input_tokens), int(cached), int(output), int(total)

    raise ValueError("Unsupported usage payload structure")
