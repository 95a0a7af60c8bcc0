"""
Daily health reports: LLM generation, synthetic fallback and exposure records.
"""

from .models import (
    DailyGuidance,
    DailyHealthReport,
    DailySummary,
    ExposureRecord,
    LifePhaseWindow,
    PhaseGuidance,
    PhaseRisks,
    SafeWindow,
    SafetyAdvisory,
    WhatChanged,
)
from .synthetic import generate_synthetic_report, risk_description, seeded_random
from .daily import (
    build_life_phases,
    compose_advisory,
    exposure_record,
    generate_daily_health_report,
    generate_safety_advisory,
    what_changed,
)

__all__ = [
    "DailyGuidance",
    "DailyHealthReport",
    "DailySummary",
    "ExposureRecord",
    "LifePhaseWindow",
    "PhaseGuidance",
    "PhaseRisks",
    "SafeWindow",
    "SafetyAdvisory",
    "WhatChanged",
    "generate_synthetic_report",
    "risk_description",
    "seeded_random",
    "build_life_phases",
    "compose_advisory",
    "exposure_record",
    "generate_daily_health_report",
    "generate_safety_advisory",
    "what_changed",
]
