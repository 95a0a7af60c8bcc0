import json
from datetime import date

import pytest

from stepsafe.config import UserProfile
from stepsafe.llm import LLMSettings
from stepsafe.report import daily
from stepsafe.risk import ClimateData, analyze_risks

TODAY = ClimateData(temperature=95, humidity=60, uv_index=9, aqi=120, rain_probability=20)
YESTERDAY = ClimateData(temperature=90, humidity=55, uv_index=7, aqi=70, rain_probability=0)


@pytest.fixture
def settings() -> LLMSettings:
    return LLMSettings(model="gpt-4o-mini", api_key="test", provider="openai")


def _llm_payload(**overrides) -> dict:
    payload = {
        "daily_summary": {
            "personal_health_risk_score": 71.6,
            "quick_insight": "Your personal health risk is elevated today, mainly due to afternoon heat.",
            "what_changed": {"temp_change": 0, "aqi_change": 0},
            "safe_windows": [
                {"start": "00:00", "end": "11:00", "is_safe": True},
                {"start": "11:00", "end": "16:00", "is_safe": False},
                {"start": "16:00", "end": "24:00", "is_safe": True},
            ],
        },
        "safety_advisory": {"advisory": "Heat and UV are high this afternoon. Stay hydrated and seek shade."},
        "daily_guidance": {
            "phases": [
                {
                    "phase": "Morning Commute",
                    "start_time": "07:30",
                    "end_time": "08:30",
                    "risks": {"heat_risk": "Medium", "uv_risk": "Low", "aqi_risk": "High", "rain_exposure": "Low"},
                    "summary": "A warm but manageable walk.",
                    "recommendations": ["Carry water.", "Check the AQI before leaving."],
                }
            ]
        },
    }
    payload.update(overrides)
    return payload


def test_build_life_phases(walker) -> None:
    phases = daily.build_life_phases(walker)

    assert [(p.phase, p.start_time, p.end_time) for p in phases] == [
        ("Morning Commute", "07:30", "08:30"),
        ("Work Hours", "08:30", "17:30"),
        ("Evening Commute", "17:30", "18:00"),
    ]


def test_late_evening_commute_wraps_midnight() -> None:
    profile = UserProfile.model_validate(
        {"location": {"city": "Night City"}, "routine": {"evening_commute_start": "23:15"}}
    )

    assert daily.build_life_phases(profile)[-1].end_time == "00:00"


def test_llm_report_is_validated_and_uses_measured_changes(walker, settings, monkeypatch) -> None:
    calls = []

    def fake_generate(prompt, system_prompt, llm_settings, *, json_output=False):
        calls.append((prompt, json_output))
        return json.dumps(_llm_payload())

    monkeypatch.setattr(daily, "generate_text", fake_generate)

    report = daily.generate_daily_health_report(walker, TODAY, YESTERDAY, settings=settings, day=date(2026, 7, 15))

    assert report.source == "llm"
    assert report.daily_summary.personal_health_risk_score == 72
    assert report.daily_summary.what_changed.temp_change == 5
    assert report.daily_summary.what_changed.aqi_change == 50
    assert report.daily_summary.safe_windows[-1].end == "23:59"

    prompt, json_output = calls[0]
    assert json_output is True
    assert "temp_change: 5" in prompt
    assert "Phase: Evening Commute, Start: 17:30, End: 18:00" in prompt
    assert "Heat Sensitivity: High" in prompt


@pytest.mark.parametrize(
    "raw",
    [
        "this is not json",
        json.dumps(["not", "an", "object"]),
        json.dumps(_llm_payload(daily_summary={"personal_health_risk_score": 140})),
    ],
)
def test_invalid_llm_output_falls_back_to_synthetic(walker, settings, monkeypatch, raw) -> None:
    monkeypatch.setattr(daily, "generate_text", lambda *args, **kwargs: raw)

    report = daily.generate_daily_health_report(walker, TODAY, YESTERDAY, settings=settings, day=date(2026, 7, 15))

    assert report.source == "synthetic"
    assert report.daily_summary.what_changed.temp_change == 5
    assert report.daily_summary.what_changed.aqi_change == 50


def test_llm_error_falls_back_to_synthetic(walker, settings, monkeypatch) -> None:
    def failing_generate(*args, **kwargs):
        raise RuntimeError("LLM response for model gpt-4o-mini contained no usable text.")

    monkeypatch.setattr(daily, "generate_text", failing_generate)

    report = daily.generate_daily_health_report(walker, TODAY, YESTERDAY, settings=settings, day=date(2026, 7, 15))

    assert report.source == "synthetic"


def test_no_settings_skips_llm(walker, monkeypatch) -> None:
    monkeypatch.setattr(daily, "generate_text", lambda *args, **kwargs: pytest.fail("LLM called"))

    report = daily.generate_daily_health_report(walker, TODAY, YESTERDAY, day=date(2026, 7, 15))

    assert report.source == "synthetic"
    assert report.daily_summary.what_changed.temp_change == 5


def test_safety_advisory_uses_llm_text(settings, monkeypatch) -> None:
    monkeypatch.setattr(daily, "generate_text", lambda *args, **kwargs: "Take it easy this afternoon.")

    advisory = daily.generate_safety_advisory(analyze_risks(TODAY), settings=settings)

    assert advisory == "Take it easy this afternoon."


def test_safety_advisory_fallback_mentions_elevated_risks(settings, monkeypatch) -> None:
    def failing_generate(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(daily, "generate_text", failing_generate)

    advisory = daily.generate_safety_advisory(analyze_risks(TODAY), settings=settings)

    assert advisory.startswith("Today calls for extra care:")
    assert "UV Risk" in advisory
    assert "Air Quality (AQI)" in advisory


def test_compose_advisory_keeps_acronyms() -> None:
    profile = analyze_risks(ClimateData(temperature=101, humidity=30, uv_index=9, aqi=241, rain_probability=0))

    advisory = daily.compose_advisory(profile)

    assert "apply SPF 30+ sunscreen" in advisory
    assert "(N95/KN95)" in advisory
    assert "spf" not in advisory


def test_compose_advisory_for_calm_day() -> None:
    profile = analyze_risks(ClimateData(temperature=70, humidity=40, uv_index=2, aqi=30, rain_probability=10))

    assert "favorable" in daily.compose_advisory(profile)


def test_exposure_record(walker) -> None:
    report = daily.generate_daily_health_report(walker, TODAY, YESTERDAY, day=date(2026, 7, 15))

    record = daily.exposure_record(report, TODAY, date(2026, 7, 15))

    assert record.date == "2026-07-15"
    assert record.personal_health_risk_score == report.daily_summary.personal_health_risk_score
    assert (record.max_heat, record.max_aqi, record.max_uv) == (95, 120, 9)
