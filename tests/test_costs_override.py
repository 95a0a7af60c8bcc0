import textwrap

import pytest

from stepsafe.llm import costs


def test_llm_costs_override(tmp_path, monkeypatch) -> None:
    override = textwrap.dedent(
        """
        [model."gemini-3-flash-preview"]
        input = 0.9
        cached_input = 0.4
        output = 3.3
        """
    )
    (tmp_path / "llm_costs.toml").write_text(override, encoding="utf-8")

    monkeypatch.chdir(tmp_path)
    costs._load_external_costs.cache_clear()
    try:
        entry = costs.get_model_cost("gemini-3-flash-preview")
        assert entry is not None
        assert entry.input_per_million == 0.9
        assert entry.cached_input_per_million == 0.4
        assert entry.output_per_million == 3.3

        # Built-in entries stay available alongside the override.
        assert costs.get_model_cost("gpt-4o-mini") == costs.MODEL_COSTS["gpt-4o-mini"]
    finally:
        costs._load_external_costs.cache_clear()


def test_cost_for_usage_prices_cached_tokens_separately() -> None:
    entry = costs.ModelCost(input_per_million=1.0, cached_input_per_million=0.5, output_per_million=2.0)

    usd = entry.cost_for_usage(input_tokens=1_000_000, output_tokens=500_000, cached_input_tokens=400_000)

    assert usd == pytest.approx(1.8)
