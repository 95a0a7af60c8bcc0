"""
Deterministic synthetic daily reports.

Used whenever no LLM is configured or the LLM call fails. The same profile on
the same calendar day always produces the same report.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from ..config import UserProfile
from ..risk import RiskLevel
from ..util import hour_after
from .models import (
    DailyGuidance,
    DailyHealthReport,
    DailySummary,
    PhaseGuidance,
    PhaseRisks,
    SafeWindow,
    SafetyAdvisory,
    WhatChanged,
)

# Used when the profile has not been geocoded yet (Los Angeles).
DEFAULT_LATITUDE = 34.05
DEFAULT_LONGITUDE = -118.24


def seeded_random(seed: float) -> float:
    """Fractional part of sin(seed) * 10000, a cheap repeatable value in [0, 1)."""
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def daily_seed(profile: UserProfile, day: date) -> float:
    # Zero-based month.
    lat = profile.location.lat or DEFAULT_LATITUDE
    lon = profile.location.lon or DEFAULT_LONGITUDE
    return day.day + (day.month - 1) + lat + lon


def risk_level_from_fraction(value: float) -> RiskLevel:
    if value > 0.8:
        return "Extreme"
    if value > 0.6:
        return "High"
    if value > 0.4:
        return "Medium"
    return "Low"


def risk_description(score: float) -> str:
    """Describe a 0-100 personal health risk score in words."""
    if score > 75:
        return "High"
    if score > 50:
        return "Elevated"
    if score > 25:
        return "Moderate"
    return "Low"


def generate_synthetic_report(profile: UserProfile, *, day: Optional[date] = None) -> DailyHealthReport:
    """
    Build a plausible report from a seed derived from the profile location and date.
    """
    seed = daily_seed(profile, day or date.today())

    score = math.floor(seeded_random(seed) * 70) + 20
    temp_change = seeded_random(seed + 1) * 10 - 5
    aqi_change = math.floor(seeded_random(seed + 2) * 40 - 20)
    midday_unsafe = score > 50
    description = risk_description(score).lower()
    driver = "high heat and UV exposure" if score > 60 else "moderate air quality"

    routine = profile.routine
    active_commute = profile.commute_type in ("Bike", "Walk")

    phases = [
        PhaseGuidance(
            phase="Morning Commute",
            start_time=routine.morning_commute_start,
            end_time=routine.work_hours_start,
            risks=PhaseRisks(
                heat_risk=risk_level_from_fraction(seeded_random(seed + 3)),
                uv_risk="Low",
                aqi_risk=risk_level_from_fraction(seeded_random(seed + 4)),
                rain_exposure="Low",
            ),
            summary="Your morning commute looks relatively clear. Air quality is the main factor to consider.",
            recommendations=[
                "Check the AQI before you leave.",
                "Consider a light mask if you are sensitive to air quality."
                if active_commute
                else "Ensure your car's air filter is clean.",
                "Enjoy the cooler morning temperatures.",
            ],
        ),
        PhaseGuidance(
            phase="Work Hours",
            start_time=routine.work_hours_start,
            end_time=routine.evening_commute_start,
            risks=PhaseRisks(
                heat_risk=risk_level_from_fraction(seeded_random(seed + 5)),
                uv_risk=risk_level_from_fraction(seeded_random(seed + 6)),
                aqi_risk=risk_level_from_fraction(seeded_random(seed + 7)),
                rain_exposure="Low",
            ),
            summary="Midday brings the highest heat and UV risk. Plan outdoor activities carefully.",
            recommendations=[
                "If you go out for lunch, try to stay in the shade.",
                "Apply sunscreen if you will be near windows or outdoors.",
                "Stay hydrated throughout the day.",
            ],
        ),
        PhaseGuidance(
            phase="Evening Commute",
            start_time=routine.evening_commute_start,
            end_time=hour_after(routine.evening_commute_start),
            risks=PhaseRisks(
                # Evening heat is damped.
                heat_risk=risk_level_from_fraction(seeded_random(seed + 8) * 0.7),
                uv_risk="Low",
                aqi_risk=risk_level_from_fraction(seeded_random(seed + 9)),
                rain_exposure="Low",
            ),
            summary="Conditions improve for your evening commute, but be aware of lingering air quality issues.",
            recommendations=[
                "It's a good time for a walk or bike ride, but check the AQI first.",
                "Open windows to ventilate your home once home, if AQI is good.",
            ],
        ),
    ]

    return DailyHealthReport(
        daily_summary=DailySummary(
            personal_health_risk_score=score,
            quick_insight=f"Your personal health risk is {description} today, mainly due to {driver}.",
            what_changed=WhatChanged(temp_change=temp_change, aqi_change=aqi_change),
            safe_windows=[
                SafeWindow(start="00:00", end="07:00", is_safe=True),
                SafeWindow(start="07:00", end="12:00", is_safe=True),
                SafeWindow(start="12:00", end="16:00", is_safe=not midday_unsafe),
                SafeWindow(start="16:00", end="23:59", is_safe=True),
            ],
        ),
        safety_advisory=SafetyAdvisory(
            advisory=(
                f"Overall, today presents a {description} risk. Pay attention during midday hours when UV and "
                "heat levels are highest. Remember to stay hydrated and take breaks if you're outdoors."
            )
        ),
        daily_guidance=DailyGuidance(phases=phases),
        source="synthetic",
    )
