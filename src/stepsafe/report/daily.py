"""
Daily health report and safety advisory generation.

Both use the LLM when settings are supplied and fall back to deterministic
text when no model is configured or the call fails.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import List, Optional

from pydantic import ValidationError

from ..config import UserProfile
from ..llm import (
    SYSTEM_PROMPT_ADVISORY,
    SYSTEM_PROMPT_DAILY_REPORT,
    LLMSettings,
    build_advisory_user_prompt,
    build_daily_report_user_prompt,
    generate_text,
)
from ..risk import ClimateData, RiskProfile, analyze_risks, generate_checklist, is_elevated
from ..util import hour_after
from .models import DailyHealthReport, ExposureRecord, LifePhaseWindow, WhatChanged
from .synthetic import generate_synthetic_report

logger = logging.getLogger(__name__)


def build_life_phases(profile: UserProfile) -> List[LifePhaseWindow]:
    """
    Split the routine into morning commute, work hours and evening commute.

    The evening commute is taken to last one hour.
    """
    routine = profile.routine
    return [
        LifePhaseWindow("Morning Commute", routine.morning_commute_start, routine.work_hours_start),
        LifePhaseWindow("Work Hours", routine.work_hours_start, routine.evening_commute_start),
        LifePhaseWindow("Evening Commute", routine.evening_commute_start, hour_after(routine.evening_commute_start)),
    ]


def what_changed(today: ClimateData, yesterday: ClimateData) -> WhatChanged:
    return WhatChanged(
        temp_change=today.temperature - yesterday.temperature,
        aqi_change=today.aqi - yesterday.aqi,
    )


def generate_daily_health_report(
    profile: UserProfile,
    today: ClimateData,
    yesterday: ClimateData,
    *,
    settings: Optional[LLMSettings] = None,
    day: Optional[date] = None,
) -> DailyHealthReport:
    """
    Produce the full daily report for a profile in a single LLM call.

    Args:
        profile: The user's profile.
        today: Current conditions.
        yesterday: Yesterday's conditions, used for the "what changed" figures.
        settings: LLM settings; None skips the LLM entirely.
        day: Report date, used to seed the synthetic fallback.

    Returns:
        A validated DailyHealthReport. `what_changed` always holds the measured
        differences, whatever the model returned.
    """
    changes = what_changed(today, yesterday)

    if settings is None:
        logger.info("No LLM configured; using synthetic report for profile '%s'.", profile.id)
        return _with_changes(generate_synthetic_report(profile, day=day), changes)

    risk_profile = analyze_risks(today)
    prompt = build_daily_report_user_prompt(
        profile,
        today,
        temp_change=changes.temp_change,
        aqi_change=changes.aqi_change,
        risk_profile=risk_profile,
        phases=build_life_phases(profile),
    )
    try:
        raw = generate_text(prompt, SYSTEM_PROMPT_DAILY_REPORT, settings, json_output=True)
        report = parse_report(raw)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("LLM returned an invalid daily report for '%s' (%s); using synthetic report.", profile.id, exc)
        return _with_changes(generate_synthetic_report(profile, day=day), changes)
    except Exception as exc:
        logger.warning("Daily report generation failed for '%s' (%s); using synthetic report.", profile.id, exc)
        return _with_changes(generate_synthetic_report(profile, day=day), changes)

    logger.info(
        "Generated daily report for '%s' via %s (score=%s)",
        profile.id,
        settings.model,
        report.daily_summary.personal_health_risk_score,
    )
    return _with_changes(report, changes)


def parse_report(raw: str) -> DailyHealthReport:
    """Decode and validate the JSON object returned by the model."""
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise json.JSONDecodeError("Expected a JSON object", raw, 0)
    payload["source"] = "llm"
    return DailyHealthReport.model_validate(payload)


def _with_changes(report: DailyHealthReport, changes: WhatChanged) -> DailyHealthReport:
    summary = report.daily_summary.model_copy(update={"what_changed": changes})
    return report.model_copy(update={"daily_summary": summary})


def generate_safety_advisory(risk_profile: RiskProfile, *, settings: Optional[LLMSettings] = None) -> str:
    """
    Concise 3-4 line advisory for the five risk levels.
    """
    if settings is not None:
        try:
            return generate_text(build_advisory_user_prompt(risk_profile), SYSTEM_PROMPT_ADVISORY, settings)
        except Exception as exc:
            logger.warning("Advisory generation failed (%s); using standard advisory.", exc)
    return compose_advisory(risk_profile)


def compose_advisory(risk_profile: RiskProfile) -> str:
    """
    Deterministic advisory built from the elevated risks and the checklist.
    """
    elevated = [risk for risk in risk_profile if is_elevated(risk.level)]
    moderate = [risk for risk in risk_profile if risk.level == "Medium"]

    if not elevated and not moderate:
        return (
            "Conditions look favorable today with low risk across heat, UV, air quality, humidity and rain. "
            "Enjoy your time outdoors and keep up your usual hydration."
        )

    sentences: List[str] = []
    if elevated:
        names = _join_names(risk.name for risk in elevated)
        sentences.append(f"Today calls for extra care: {names} {'is' if len(elevated) == 1 else 'are'} elevated.")
        sentences.append(elevated[0].explanation)
    else:
        names = _join_names(risk.name for risk in moderate)
        sentences.append(f"Today presents a moderate overall risk, mainly from {names}.")

    precautions = [
        _lower_first(item.recommendation) for item in generate_checklist(risk_profile) if item.id != "clothing"
    ]
    if precautions:
        sentences.append(f"Remember to {_join_names(precautions)}.")
    sentences.append("Plan outdoor time for the safer parts of the day and take breaks as needed.")
    return " ".join(sentences)


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _join_names(names) -> str:
    items = list(names)
    if len(items) <= 1:
        return "".join(items)
    return ", ".join(items[:-1]) + f" and {items[-1]}"


def exposure_record(report: DailyHealthReport, today: ClimateData, day: date) -> ExposureRecord:
    """Condense a report and today's conditions into an exposure history entry."""
    return ExposureRecord(
        date=day.isoformat(),
        personal_health_risk_score=report.daily_summary.personal_health_risk_score,
        max_heat=today.temperature,
        max_aqi=today.aqi,
        max_uv=today.uv_index,
    )
