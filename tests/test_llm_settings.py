import pytest

from stepsafe.config import AppConfig
from stepsafe.llm import client, resolve_llm_settings
from stepsafe.llm.usage import normalize_openai_usage


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GEMINI_API_KEY", "OPENAI_API_KEY", "OPENROUTER_API_KEY", "STEPSAFE_DEFAULT_LLM"):
        monkeypatch.delenv(name, raising=False)


def test_default_model_is_gemini(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gem")

    settings = resolve_llm_settings()

    assert settings.model == "gemini-2.5-flash"
    assert settings.is_google
    assert settings.api_key == "gem"


def test_config_choice_beats_environment_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "oa")
    monkeypatch.setenv("STEPSAFE_DEFAULT_LLM", "gemini-2.5-flash")

    settings = resolve_llm_settings(AppConfig(llm="gpt-4o-mini"))

    assert settings.provider == "openai"
    assert settings.model == "gpt-4o-mini"
    assert not settings.is_google


def test_openrouter_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")

    settings = resolve_llm_settings(override_choice="or:meta-llama/llama-3.1-70b-instruct")

    assert settings.provider == "openrouter"
    assert settings.model == "meta-llama/llama-3.1-70b-instruct"
    assert settings.base_url == "https://openrouter.ai/api/v1"


def test_google_prefixed_gemini_uses_direct_sdk(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gem")

    settings = resolve_llm_settings(override_choice="google/gemini-2.5-flash-lite")

    assert settings.model == "gemini-2.5-flash-lite"
    assert settings.is_google


def test_missing_key_raises() -> None:
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        resolve_llm_settings(override_choice="gpt-4o-mini")


def test_unknown_model_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(RuntimeError, match="Unknown LLM"):
        resolve_llm_settings(override_choice="llama-3")


def test_clean_llm_output_strips_reasoning_and_fences() -> None:
    raw = '<think>let me see</think>\n```json\n{"a": 1}\n```'

    assert client._clean_llm_output(raw) == '{"a": 1}'
    assert client._clean_llm_output("") == ""


def test_coerce_message_content_handles_parts() -> None:
    parts = [{"type": "text", "text": "Hello"}, "world"]

    assert client._coerce_message_content(parts) == "Hello\nworld"
    assert client._coerce_message_content(None) == ""


def test_consume_last_cost_resets() -> None:
    client._remember_cost(1.5)

    assert client.consume_last_cost_cents() == 1.5
    assert client.consume_last_cost_cents() == 0.0


def test_normalize_openai_usage_reads_cached_tokens() -> None:
    usage = {
        "prompt_tokens": 100,
        "completion_tokens": 20,
        "total_tokens": 120,
        "prompt_tokens_details": {"cached_tokens": 40},
    }

    assert normalize_openai_usage(usage) == (100, 40, 20, 120)
