"""
LLM pricing table used to log an estimated cost for each call.

Each entry records the USD cost per 1M tokens for standard input, cached input
and output tokens. Add an `llm_costs.toml` file in the working directory to
override or extend the table:

    [model."gpt-4o-mini"]
    input = 0.15
    cached_input = 0.075
    output = 0.60
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_EXTERNAL_COSTS_PATH = Path("llm_costs.toml")


@dataclass(frozen=True)
class ModelCost:
    """Price information for one model (USD per 1M tokens)."""

    input_per_million: float
    cached_input_per_million: float
    output_per_million: float

    def cost_for_usage(self, *, input_tokens: int, output_tokens: int, cached_input_tokens: int = 0) -> float:
        """Estimated USD charge for a single call."""
        standard_input = max(input_tokens - cached_input_tokens, 0)
        return (
            (standard_input / 1_000_000) * self.input_per_million
            + (cached_input_tokens / 1_000_000) * self.cached_input_per_million
            + (output_tokens / 1_000_000) * self.output_per_million
        )


MODEL_COSTS: Dict[str, ModelCost] = {
    "gpt-4o-mini": ModelCost(input_per_million=0.15, cached_input_per_million=0.075, output_per_million=0.60),
    "gpt-4.1-mini": ModelCost(input_per_million=0.40, cached_input_per_million=0.10, output_per_million=1.60),
    "gpt-4o": ModelCost(input_per_million=2.50, cached_input_per_million=1.25, output_per_million=10.00),
    "gemini-2.5-flash": ModelCost(input_per_million=0.30, cached_input_per_million=0.03, output_per_million=2.50),
    "gemini-2.5-flash-lite": ModelCost(input_per_million=0.10, cached_input_per_million=0.01, output_per_million=0.40),
}


def get_model_cost(model_name: str, *, registry: Optional[Dict[str, ModelCost]] = None) -> Optional[ModelCost]:
    """
    Return the ModelCost entry for the given identifier, if available.

    Entries from `llm_costs.toml` take precedence over the built-in table.
    """
    external = _load_external_costs()
    if external and model_name in external:
        return external[model_name]
    return (registry or MODEL_COSTS).get(model_name)


@lru_cache(maxsize=1)
def _load_external_costs() -> Optional[Dict[str, ModelCost]]:
    if not _EXTERNAL_COSTS_PATH.exists():
        return None
    try:
        payload = tomllib.loads(_EXTERNAL_COSTS_PATH.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Failed to read llm_costs.toml (%s). Ignoring override.", exc)
        return None

    table = payload.get("model", payload)
    if not isinstance(table, dict):
        logger.warning("Invalid llm_costs.toml format; expected [model.\"<name>\"] tables.")
        return None

    parsed: Dict[str, ModelCost] = {}
    for name, values in table.items():
        if not isinstance(values, dict):
            continue
        try:
            input_cost = values.get("input", values.get("input_per_million"))
            output_cost = values.get("output", values.get("output_per_million"))
            cached_cost = values.get("cached_input", values.get("cached_input_per_million", input_cost))
            if input_cost is None or output_cost is None:
                raise KeyError("input/output cost missing")
            parsed[name] = ModelCost(
                input_per_million=float(input_cost),
                cached_input_per_million=float(cached_cost),
                output_per_million=float(output_cost),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping invalid cost entry for model %s in llm_costs.toml.", name)
    return parsed or None
