"""
Wrappers around OpenAI-compatible APIs and Google Gemini.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from openai import OpenAI

from .settings import LLMSettings
from .usage import log_gemini_usage_and_cost, log_openai_usage_and_cost

logger = logging.getLogger(__name__)
_LAST_COST_CENTS: float = 0.0

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def generate_text(prompt: str, system_prompt: str, settings: LLMSettings, *, json_output: bool = False) -> str:
    """
    Execute the LLM request and return the cleaned text.

    Dispatches to the Google GenAI client or the OpenAI-compatible client
    depending on the settings.

    Args:
        prompt: The user prompt containing profile and climate data.
        system_prompt: The system prompt defining the persona and rules.
        settings: Provider configuration.
        json_output: Ask the provider for a bare JSON object.

    Returns:
        The generated text with reasoning wrappers and code fences removed.

    Raises:
        RuntimeError: If the provider returned no usable text.
    """
    if settings.is_google:
        text = _call_gemini(prompt, system_prompt, settings, json_output=json_output)
    else:
        text = _call_openai_compatible(prompt, system_prompt, settings, json_output=json_output)
    if not text:
        raise RuntimeError(f"LLM response for model {settings.model} contained no usable text.")
    return text


def _call_openai_compatible(prompt: str, system_prompt: str, settings: LLMSettings, *, json_output: bool) -> str:
    client = OpenAI(api_key=settings.api_key, base_url=settings.base_url)
    request_kwargs: dict[str, Any] = {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ],
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
        "stream": False,
    }
    if json_output:
        request_kwargs["response_format"] = {"type": "json_object"}
    response = client.chat.completions.create(**request_kwargs)
    _remember_cost(log_openai_usage_and_cost(settings.model, getattr(response, "usage", None)))

    choice = response.choices[0] if response.choices else None
    message = choice.message if choice is not None else None
    raw_text = _coerce_message_content(getattr(message, "content", None))
    cleaned = _clean_llm_output(raw_text)
    if not cleaned:
        logger.warning(
            "LLM response for model %s contained no usable text (finish_reason=%s).",
            settings.model,
            getattr(choice, "finish_reason", None),
        )
    return cleaned


def _call_gemini(prompt: str, system_prompt: str, settings: LLMSettings, *, json_output: bool) -> str:
    from google import genai
    from google.genai import types

    client = genai.Client(api_key=settings.api_key)
    config = types.GenerateContentConfig(
        temperature=settings.temperature,
        max_output_tokens=settings.max_tokens,
        system_instruction=system_prompt,
        response_mime_type="application/json" if json_output else None,
    )
    response = client.models.generate_content(model=settings.model, contents=prompt, config=config)
    _remember_cost(log_gemini_usage_and_cost(settings.model, getattr(response, "usage_metadata", None)))

    text = (getattr(response, "text", None) or "").strip()
    if text:
        return _clean_llm_output(text)

    candidates = getattr(response, "candidates", None)
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) if content is not None else None
        if parts and getattr(parts[0], "text", None):
            return _clean_llm_output(parts[0].text)

    raise RuntimeError(f"Gemini response was empty or blocked: {getattr(response, 'prompt_feedback', None)}")


def _clean_llm_output(text: str) -> str:
    """
    Strip <think> blocks and surrounding markdown code fences.
    """
    if not text:
        return ""
    text = re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()
    fenced = _FENCE_PATTERN.match(text)
    if fenced:
        text = fenced.group(1)
    return text.strip()


def _coerce_message_content(content: Any) -> str:
    """
    Normalize plain strings, content-part lists and objects exposing `.text`.
    """
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
                continue
            text_value = getattr(item, "text", None)
            if not text_value and isinstance(item, dict):
                text_value = item.get("text")
            if text_value:
                parts.append(str(text_value))
        return "\n".join(parts).strip()
    text_attr = getattr(content, "text", None)
    return str(text_attr) if text_attr else str(content)


def _remember_cost(cents: float) -> None:
    global _LAST_COST_CENTS
    _LAST_COST_CENTS = cents


def consume_last_cost_cents() -> float:
    """Return and reset the most recent LLM cost (in USD cents)."""
    global _LAST_COST_CENTS
    value = _LAST_COST_CENTS
    _LAST_COST_CENTS = 0.0
    return value
