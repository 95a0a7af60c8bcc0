"""
Climate risk classification.
"""

from .models import (
    RISK_LEVELS,
    ChecklistItem,
    ClimateData,
    Risk,
    RiskLevel,
    RiskProfile,
    TimeWindow,
    UserInput,
    is_elevated,
    risk_rank,
)
from .engine import analyze_risks, generate_checklist, generate_time_windows, heat_index

__all__ = [
    "RISK_LEVELS",
    "ChecklistItem",
    "ClimateData",
    "Risk",
    "RiskLevel",
    "RiskProfile",
    "TimeWindow",
    "UserInput",
    "is_elevated",
    "risk_rank",
    "analyze_risks",
    "generate_checklist",
    "generate_time_windows",
    "heat_index",
]
