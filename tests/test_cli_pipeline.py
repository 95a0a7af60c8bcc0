import json
from typing import Dict

import pytest
from typer.testing import CliRunner

from stepsafe import cli
from stepsafe.config import load_config
from stepsafe.history import load_history, record_exposure
from stepsafe.llm.settings import LLMSettings
from stepsafe.pipeline import executor
from stepsafe.pipeline.executor import ProfilePayload
from stepsafe.report import ExposureRecord, daily
from stepsafe.risk import ClimateData

TODAY = ClimateData(temperature=95, humidity=60, uv_index=9, aqi=120, rain_probability=20)
YESTERDAY = ClimateData(temperature=90, humidity=55, uv_index=7, aqi=70, rain_probability=0)


def _flat(text: str) -> str:
    return " ".join(text.split())


def _fake_collect(profile, **_kwargs):
    if not profile.location.has_coordinates:
        return None
    return ProfilePayload(profile=profile, today=TODAY, yesterday=YESTERDAY, timezone="America/Phoenix")


def _llm_report(prompt, system_prompt, settings, *, json_output=False) -> str:
    return json.dumps(
        {
            "daily_summary": {
                "personal_health_risk_score": 68,
                "quick_insight": "Mock insight about afternoon heat.",
                "what_changed": {"temp_change": 0, "aqi_change": 0},
                "safe_windows": [
                    {"start": "00:00", "end": "12:00", "is_safe": True},
                    {"start": "12:00", "end": "16:00", "is_safe": False},
                    {"start": "16:00", "end": "23:59", "is_safe": True},
                ],
            },
            "safety_advisory": {"advisory": "Mock advisory text."},
            "daily_guidance": {"phases": []},
        }
    )


@pytest.fixture
def mocked_pipeline(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(executor, "_collect_profile_payload", _fake_collect)
    monkeypatch.setattr(
        executor,
        "resolve_llm_settings",
        lambda config, override_choice=None: LLMSettings(
            provider="openai", model=(override_choice or "gpt-4o-mini"), api_key="test"
        ),
    )
    monkeypatch.setattr(daily, "generate_text", _llm_report)


def test_cli_report_generates_dashboards(
    runner: CliRunner,
    sample_config: Dict[str, object],
    mocked_pipeline,
) -> None:
    result = runner.invoke(cli.app, ["report", "--config", str(sample_config["path"])])
    assert result.exit_code == 0, result.output
    assert "Pipeline completed." in result.output
    assert "Skipped seattle" in _flat(result.output)

    output_root = sample_config["output_root"]
    page = output_root / "alex" / "index.html"
    assert page.exists(), f"Expected HTML output at {page}"
    html = page.read_text(encoding="utf-8")
    assert "Mock insight about afternoon heat." in html
    assert "Mock advisory text." in html
    assert "▲ 5.0°F" in html

    menu_html = (output_root / "index.html").read_text(encoding="utf-8")
    assert "alex/index.html" in menu_html
    assert "seattle/index.html" in menu_html
    assert "risk score 68" in menu_html

    records = load_history(sample_config["data_dir"], "alex")
    assert len(records) == 1
    assert records[0].personal_health_risk_score == 68
    assert records[0].max_heat == 95


def test_cli_report_dry_run_writes_nothing(
    runner: CliRunner,
    sample_config: Dict[str, object],
    mocked_pipeline,
) -> None:
    result = runner.invoke(cli.app, ["report", "--config", str(sample_config["path"]), "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "Dry run complete." in result.output

    assert not (sample_config["output_root"] / "index.html").exists()
    assert load_history(sample_config["data_dir"], "alex") == []


def test_cli_report_without_llm_uses_synthetic_reports(
    runner: CliRunner,
    sample_config: Dict[str, object],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(executor, "_collect_profile_payload", _fake_collect)
    monkeypatch.setattr(executor, "resolve_llm_settings", lambda *args, **kwargs: pytest.fail("LLM resolved"))
    monkeypatch.setattr(daily, "generate_text", lambda *args, **kwargs: pytest.fail("LLM called"))

    result = runner.invoke(cli.app, ["report", "--config", str(sample_config["path"]), "--no-llm"])
    assert result.exit_code == 0, result.output

    html = (sample_config["output_root"] / "alex" / "index.html").read_text(encoding="utf-8")
    assert "synthetic estimate" in html


def test_execute_pipeline_geocodes_missing_coordinates(sample_config, monkeypatch: pytest.MonkeyPatch) -> None:
    from stepsafe.api.geocode import GeocodeResult
    from stepsafe.api.open_meteo import ClimateResponse

    looked_up = []

    def fake_geocode(name, **_kwargs):
        looked_up.append(name)
        return GeocodeResult(name="Seattle", latitude=47.6, longitude=-122.33, timezone="America/Los_Angeles")

    requests_seen = []

    def fake_current(request):
        requests_seen.append((request.latitude, request.longitude, request.cache_ttl_minutes))
        return ClimateResponse(data=TODAY)

    monkeypatch.setattr(executor, "geocode_name", fake_geocode)
    monkeypatch.setattr(executor, "fetch_current_conditions", fake_current)
    monkeypatch.setattr(executor, "fetch_yesterday_conditions", lambda request, today=None: ClimateResponse(data=YESTERDAY))

    config = load_config(sample_config["path"])
    result = executor.execute_pipeline(config, use_llm=False)

    assert looked_up == ["Seattle"]
    assert (47.6, -122.33, 10) in requests_seen
    assert [item.profile_id for item in result.results] == ["alex", "seattle"]
    assert all(item.report.source == "synthetic" for item in result.results)
    assert (sample_config["output_root"] / "seattle" / "index.html").exists()


def test_cli_check_uses_simulated_data(runner: CliRunner) -> None:
    result = runner.invoke(cli.app, ["check", "--city", "Phoenix", "--age-group", "elderly"])
    assert result.exit_code == 0, result.output

    output = _flat(result.output)
    assert "simulated" in output
    assert "Safety advisory" in output
    assert "Today calls for extra care" in output


def test_cli_check_rejects_unknown_age_group(runner: CliRunner) -> None:
    result = runner.invoke(cli.app, ["check", "--city", "Phoenix", "--age-group", "teen"])
    assert result.exit_code != 0


def test_cli_check_live_fetches_conditions(runner: CliRunner, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    from stepsafe.api.geocode import GeocodeResult

    monkeypatch.setenv("STEPSAFE_DATA_DIR", str(tmp_path))
    monkeypatch.setattr(
        cli,
        "geocode_name",
        lambda name, **_kwargs: GeocodeResult(name="Phoenix", latitude=33.45, longitude=-112.07, timezone="UTC"),
    )
    fetched = []

    def fake_climate(lat, lon, **_kwargs):
        fetched.append((lat, lon))
        return ClimateData(temperature=70, humidity=40, uv_index=2, aqi=30, rain_probability=10)

    monkeypatch.setattr(cli, "get_climate_data", fake_climate)

    result = runner.invoke(cli.app, ["check", "--city", "Phoenix", "--live"])
    assert result.exit_code == 0, result.output
    assert fetched == [(33.45, -112.07)]
    assert "favorable" in _flat(result.output)


def test_cli_check_llm_unavailable_falls_back(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    def no_llm(*_args, **_kwargs):
        raise RuntimeError("Environment variable GEMINI_API_KEY is required for the selected LLM.")

    monkeypatch.setattr(cli, "resolve_llm_settings", no_llm)

    result = runner.invoke(cli.app, ["check", "--city", "Phoenix", "--llm"])
    assert result.exit_code == 0, result.output
    output = _flat(result.output)
    assert "LLM unavailable" in output
    assert "Today calls for extra care" in output


def test_cli_history_lists_records(runner: CliRunner, sample_config: Dict[str, object]) -> None:
    record_exposure(
        sample_config["data_dir"],
        "alex",
        ExposureRecord(date="2026-07-15", personal_health_risk_score=61, max_heat=95, max_aqi=120, max_uv=9),
    )

    result = runner.invoke(cli.app, ["history", "--config", str(sample_config["path"]), "--profile", "alex"])
    assert result.exit_code == 0, result.output
    assert "2026-07-15" in result.output

    missing = runner.invoke(cli.app, ["history", "--config", str(sample_config["path"]), "--profile", "nobody"])
    assert missing.exit_code == 1


def test_cli_config_hash(runner: CliRunner, sample_config: Dict[str, object]) -> None:
    result = runner.invoke(cli.app, ["config-hash", "--config", str(sample_config["path"])])
    assert result.exit_code == 0, result.output
    assert load_config(sample_config["path"]).hash in result.output.replace("\n", "")


def test_cli_reports_config_errors(runner: CliRunner, tmp_path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text('unexpected = "nope"\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["config-hash", "--config", str(path)])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_cli_version(runner: CliRunner) -> None:
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert "stepsafe" in result.output
